"""
Sentinel Assistant Chat
Stateless conversational adapter: the caller sends the whole transcript every turn
"""
import logging
from typing import Dict, List, Optional, Sequence

from customs_sentinel.agent_prompts import SENTINEL_CHAT_SYSTEM_PROMPT
from customs_sentinel.errors import ConversationError, SentinelError
from customs_sentinel.models.customs import ChatRole, Turn
from customs_sentinel.services.llm_client import LLMService

logger = logging.getLogger('customs_sentinel.chat')

_ROLE_TO_OPENAI = {
    ChatRole.OPERATOR: "user",
    ChatRole.ASSISTANT: "assistant",
}


def build_messages(history: Sequence[Turn], new_message: str) -> List[Dict[str, str]]:
    """System instruction, then history oldest first, then the new operator message"""
    messages = [{"role": "system", "content": SENTINEL_CHAT_SYSTEM_PROMPT}]
    for turn in history:
        messages.append({"role": _ROLE_TO_OPENAI[turn.role], "content": turn.text})
    messages.append({"role": "user", "content": new_message})
    return messages


class SentinelChat:
    def __init__(self, llm: LLMService, deployment: Optional[str] = None):
        self.llm = llm
        self.deployment = deployment

    async def converse(self, history: Sequence[Turn], new_message: str) -> str:
        """
        Get the assistant's reply to new_message given the prior transcript.

        history is read, never modified. No retry on failure; the caller
        decides what to show instead.
        """
        messages = build_messages(history, new_message)
        logger.debug(f"Sending chat turn with {len(history)} prior turns")
        try:
            reply = await self.llm.complete(messages, deployment=self.deployment)
        except SentinelError as e:
            logger.error(f"❌ Chat call failed: {e}")
            raise ConversationError(f"Assistant unavailable: {e}") from e

        if not reply.strip():
            raise ConversationError("Assistant returned an empty reply")
        return reply
