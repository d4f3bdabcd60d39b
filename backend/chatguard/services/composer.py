"""
ChatGuard Backend — Reply Composer
====================================

What:  Builds the structured chat reply for a validated message.
How:   The summary, key points and next actions are fixed placeholder text;
       only the preview echoes the user's (normalized) input.

The static content stands in for a real model call. Replacing compose() with
an inference client is the intended extension point; the reply shape stays.
"""

from chatguard.schemas.chat import ChatReply, ReplyMeta

DEFAULT_PREVIEW_LENGTH = 50

SUMMARY = "User sent a greeting message."
KEY_POINTS = (
    "Message received successfully",
    "Backend API is functioning correctly",
)
NEXT_ACTIONS = (
    "Integrate real AI provider",
    "Enhance frontend rendering",
)


def compose(normalized_message: str, preview_length: int = DEFAULT_PREVIEW_LENGTH) -> ChatReply:
    """Return a fresh ChatReply for `normalized_message`."""
    return ChatReply(
        summary=SUMMARY,
        key_points=list(KEY_POINTS),
        next_actions=list(NEXT_ACTIONS),
        meta=ReplyMeta(input_preview=normalized_message[:preview_length]),
    )
