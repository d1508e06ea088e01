# examples/registry_chat.py
"""
Example showing how a chat gateway keeps live sessions in a SessionRegistry.

This script shows how to:
1. Load the registry configuration (packaged defaults + optional user file).
2. Store a session object for each conversation id.
3. Record transcript entries as turns happen.
4. Look a session up again, then release it when the conversation ends.

To run this example:
- Ensure you have session-registry installed (`pip install .`).
"""

import asyncio
import logging
import uuid

from session_registry import AsyncSessionRegistry, create_session_registry, load_registry_config

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class EchoSession:
    """Toy conversational session standing in for a real model session."""

    def respond(self, prompt: str) -> str:
        return f"echo: {prompt}"


async def handle_turn(registry: AsyncSessionRegistry, conversation_id: str, prompt: str) -> str:
    session = await registry.get_session(conversation_id)
    if session is None:
        logger.info(f"No live session for '{conversation_id}', creating one.")
        session = EchoSession()
        await registry.store(session, conversation_id)

    await registry.append_to_transcript({"role": "user", "content": prompt}, conversation_id)
    reply = session.respond(prompt)
    await registry.append_to_transcript({"role": "assistant", "content": reply}, conversation_id)
    return reply


async def main():
    """Runs the registry example."""
    registry = AsyncSessionRegistry(create_session_registry(config=load_registry_config()))
    conversation_id = f"example_{uuid.uuid4()}"

    for prompt in ["hello", "how are you?"]:
        reply = await handle_turn(registry, conversation_id, prompt)
        logger.info(f"{prompt!r} -> {reply!r}")

    for entry in await registry.get_transcript(conversation_id):
        logger.info(f"  [{entry['role']}] {entry['content']}")
    logger.info(f"Registry stats: {await registry.stats()}")

    await registry.remove_session(conversation_id)
    logger.info(f"Session released; still live: {await registry.has_session(conversation_id)}")


if __name__ == "__main__":
    asyncio.run(main())
