"""modules/tool_usage: distance and clock helpers shared by the planners."""
