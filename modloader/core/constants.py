from __future__ import annotations

CONSOLE_PORT_ARGUMENT = "consolePort"

MANIFEST_FILE_NAME = "manifest.json"
LOADER_CONFIG_FILE_NAME = "loader.json"

EXPECTED_GAME_VERSION = "1.1.15.1018"

DEFAULT_COMPANION_FILES = ("UnityEngine.CoreModule.dll", "Assembly-CSharp.dll")

EPIC_MARKER = "epic"
EPIC_LAUNCH_URI = "com.epicgames.launcher://apps/starfish%3A601d0668cef146bd8eef75d43c6bbb0b%3AStarfish?action=launch&silent=true"
STEAM_MARKER = "steam"
STEAM_APP_ID = "753640"

GAME_PATH_ENV = "MODLOADER_GAME_PATH"
