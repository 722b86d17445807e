"""System instructions prepended to model calls.

Neither instruction is stored in the thread history; they are added to
the message list for each model call only.
"""

NO_TOOLS_INSTRUCTION = """You are a helpful AI assistant.

No tools are currently connected, so respond using your built-in knowledge. \
If the user asks for an operation that would need a tool (checking the current \
time or listing files), politely explain that \
the tool is not connected right now and offer to help with something else.

Be conversational and helpful. You can discuss general knowledge, programming \
concepts, and give guidance on a wide range of topics."""


def tools_instruction(tool_names: list[str]) -> str:
    """Instruction steering the model towards the attached tools."""
    available = ", ".join(tool_names)
    return (
        f"You are a helpful AI assistant with these tools: {available}\n\n"
        "When a tool can give specific, current information for the user's request, "
        "call it instead of answering from general knowledge. Use the exact parameter "
        "names given in each tool's description, then answer based on the tool results."
    )
