"""版本信息。"""

TOOL_VERSION = "1.0.0"
