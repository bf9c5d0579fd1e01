from __future__ import annotations

import os
import shutil
from typing import Iterable, List

from modloader.core.console import MessageType, ModConsole
from modloader.core.errors import FileStageError


def copy_file(src: str, dst: str) -> None:
    if not os.path.isfile(src):
        raise FileNotFoundError(f"source missing: {src}")
    os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)
    shutil.copyfile(src, dst)


class HostFilePreparer:
    """
    Copies companion files from the game's managed directory next to the loader.
    Each file is independent; a failed copy is reported and the rest continue.
    """

    def __init__(self, *, console: ModConsole, files: Iterable[str]):
        self.console = console
        self.files = [str(f) for f in files]

    def copy_game_files(self, managed_path: str, dest_dir: str) -> List[str]:
        copied: List[str] = []
        for name in self.files:
            try:
                copy_file(os.path.join(managed_path, name), os.path.join(dest_dir, name))
                copied.append(name)
            except Exception as e:  # noqa: BLE001
                self.console.report(FileStageError(f"Error while copying game file {name}: {e}", file=name))
        self.console.write_line("Game files copied.", MessageType.Info)
        return copied


class HostPatcher:
    """
    Applies the loader's core patches: files under patch_root are written into the
    game's managed directory. The original of each replaced file is kept once as
    <name>.orig.
    """

    def __init__(self, *, console: ModConsole, patch_root: str, files: Iterable[str]):
        self.console = console
        self.patch_root = patch_root
        self.files = [str(f) for f in files]

    def patch_host(self, managed_path: str) -> List[str]:
        if not self.files:
            self.console.write_line("No core patches configured.", MessageType.Debug)
            return []
        patched: List[str] = []
        for name in self.files:
            target = os.path.join(managed_path, name)
            try:
                backup = target + ".orig"
                if os.path.isfile(target) and not os.path.exists(backup):
                    shutil.copyfile(target, backup)
                copy_file(os.path.join(self.patch_root, name), target)
                patched.append(name)
            except Exception as e:  # noqa: BLE001
                self.console.report(FileStageError(f"Error while applying core patch {name}: {e}", file=name))
        self.console.write_line(f"Core patches applied ({len(patched)}/{len(self.files)}).", MessageType.Info)
        return patched
