"""User-facing string literals."""

from __future__ import annotations

PLUGIN_NAME = "AdaptiveFPS"

# Commands
COMMAND_HELP = "AdaptiveFPS: /afps ic|ooc 1|2|3, /afps toggle, /afps reset, /afps debug"
STATUS_FORMAT = "AdaptiveFPS: IC={0}, OOC={1}, Enabled={2}"
USAGE_IC = "Usage: /afps ic 1|2|3"
USAGE_OOC = "Usage: /afps ooc 1|2|3"
UNKNOWN_COMMAND = "AdaptiveFPS: Unknown command. Use /afps for help."
ENABLED_FORMAT = "AdaptiveFPS: {0}"
COMBAT_SET_FORMAT = "AdaptiveFPS: Combat cap set to {0}"
OOC_SET_FORMAT = "AdaptiveFPS: OOC cap set to {0}"
RESET_FORMAT = "AdaptiveFPS: Reset to defaults - Combat: {0}, OOC: {1}"
DEBUG_FORMAT = "AdaptiveFPS: {0} | Current: {1} | Target: {2}"
SAVE_FAILED = "AdaptiveFPS: settings changed but could not be saved ({0})"

# Tooltip
TOOLTIP_BASE = "Left-click cycles in combat and right-click cycles out of combat framerate."
TOOLTIP_MAIN_SUFFIX = "\n\nCurrent Main: {0} Hz"

# Status entry
OFF_TEXT = "Off"
MID_SEPARATOR = " | "
