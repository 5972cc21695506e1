"""Terminal front end for the image prompt client."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from typing import Callable, List, Optional, TextIO

from .app import ImagePromptApp
from .config import get_settings
from .relayclient import RelayClient
from .storageservice.storageservice import StorageService
from .utils import media_type_of

logger = logging.getLogger(__name__)

EMPTY_STATE_HINT = (
    "No images yet. Try a prompt like: "
    "“a neon cyberpunk city at night, rain, reflections”"
)
HELP_TEXT = (
    "Type a prompt and press Enter to generate.\n"
    "Commands: :list  :delete N  :download N [DIR]  :clear  :help  :quit"
)


class PromptConsole:
    """Renders :class:`ImagePromptApp` state and maps input lines to actions."""

    def __init__(
        self,
        app: ImagePromptApp,
        download_dir: str = ".",
        out: TextIO = sys.stdout,
    ) -> None:
        self.app = app
        self.download_dir = download_dir
        self.out = out
        self._commands: dict[str, Callable[[List[str]], None]] = {
            "list": self._cmd_list,
            "delete": self._cmd_delete,
            "download": self._cmd_download,
            "clear": self._cmd_clear,
            "help": self._cmd_help,
        }

    def _print(self, text: str = "") -> None:
        print(text, file=self.out)

    # --- Rendering ------------------------------------------------------------

    def render(self) -> None:
        if self.app.error:
            self._print(f"! {self.app.error}")
        if not self.app.images:
            self._print(EMPTY_STATE_HINT)
            return
        for idx, record in enumerate(self.app.images, start=1):
            created = datetime.fromtimestamp(record.createdAt / 1000).strftime("%Y-%m-%d %H:%M:%S")
            media_type = media_type_of(record.dataUrl) or "image/?"
            size_kb = len(record.dataUrl) * 3 / 4 / 1024
            self._print(f"[{idx}] {media_type}  {created}  ~{size_kb:.0f} KB")

    # --- Input handling -------------------------------------------------------

    def handle_line(self, line: str) -> bool:
        """Process one input line. Returns False when the session should end."""
        line = line.rstrip("\n")
        if line.startswith(":"):
            name, *args = line[1:].split() or [""]
            if name in ("quit", "q", "exit"):
                return False
            command = self._commands.get(name)
            if command is None:
                self._print(f"Unknown command ':{name}'. Type :help for commands.")
            else:
                command(args)
            return True

        self.app.set_prompt(line)
        if self.app.can_generate:
            self._print("Generating…")
            self.app.handle_key("Enter")
        else:
            self.app.generate()
        self.render()
        return True

    def _position(self, args: List[str]) -> Optional[int]:
        if not args or not args[0].isdigit() or not 1 <= int(args[0]) <= len(self.app.images):
            self._print(f"Expected an image number between 1 and {len(self.app.images)}.")
            return None
        return int(args[0]) - 1

    def _cmd_list(self, args: List[str]) -> None:
        self.render()

    def _cmd_delete(self, args: List[str]) -> None:
        index = self._position(args)
        if index is None:
            return
        self.app.delete_image(index)
        self._print(f"Deleted image {index + 1}.")

    def _cmd_download(self, args: List[str]) -> None:
        index = self._position(args)
        if index is None:
            return
        directory = args[1] if len(args) > 1 else self.download_dir
        try:
            path = self.app.download_image(index, directory)
        except (OSError, ValueError) as exc:
            logger.warning("Download of image %s failed: %s", index + 1, exc)
            self._print(f"! Could not save image {index + 1}: {exc}")
            return
        self._print(f"Saved {path}")

    def _cmd_clear(self, args: List[str]) -> None:
        self.app.dismiss_error()

    def _cmd_help(self, args: List[str]) -> None:
        self._print(HELP_TEXT)

    def run(self, lines: TextIO = sys.stdin) -> None:
        if self.app.prompt:
            self._print(f"Last prompt: {self.app.prompt}")
        self.render()
        self._print(HELP_TEXT)
        for line in lines:
            if not self.handle_line(line):
                break


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="imageprompt", description=__doc__)
    parser.add_argument("--relay-url", default=settings.relay_url, help="Base URL of the relay")
    parser.add_argument("--state", default=settings.client_state_path, help="SQLite state file")
    parser.add_argument("--download-dir", default=settings.download_dir)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    relay = RelayClient(settings.model_copy(update={"relay_url": args.relay_url}))
    storage = StorageService(args.state)
    try:
        console = PromptConsole(ImagePromptApp(relay, storage), download_dir=args.download_dir)
        console.run()
    except KeyboardInterrupt:
        pass
    finally:
        storage.close()
        relay.close()
    return 0


if __name__ == "__main__":  # pragma: no cover - convenience entry point
    sys.exit(main())
