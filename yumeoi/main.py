"""
Main application entry point - interactive command-line chat with graceful shutdown.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from typing import Any

from yumeoi.chat import ConversationManager, GenerationMetadata, GenerationOrchestrator
from yumeoi.chat.logging_utils import set_module_features
from yumeoi.clients import LLMBackend, create_llm_client
from yumeoi.config import Configuration
from yumeoi.errors import ServiceUnavailableError
from yumeoi.history import ConversationRepository, ConversationService, create_key_value_store
from yumeoi.history.repository import DEFAULT_KEY_PREFIX, KeyValueStore

logger = logging.getLogger(__name__)


def _configure_advanced_logging(logging_config: dict[str, Any]) -> None:
    """
    Logging configuration with hierarchical loggers and feature control.

    Levels are set on the package parent loggers so children inherit them;
    feature flags are stored for should_log_feature lookups.
    """
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    global_level = logging_config.get("level", "WARNING")
    logging.getLogger().setLevel(level_map.get(global_level, logging.WARNING))

    module_logger_map = {
        "chat": ["yumeoi.chat"],
        "clients": ["yumeoi.clients"],
        "history": ["yumeoi.history"],
    }

    for module_name, module_config in logging_config.get("modules", {}).items():
        if not isinstance(module_config, dict):
            continue

        module_level = module_config.get("level", global_level)
        level_value = level_map.get(module_level, logging.WARNING)
        for logger_name in module_logger_map.get(module_name, []):
            logging.getLogger(logger_name).setLevel(level_value)

        set_module_features(module_name, module_config.get("enable_features", {}))


def create_generator(
    configuration: Configuration, llm_client: LLMBackend | None = None
) -> GenerationOrchestrator:
    """Build the orchestrator for the configured backend."""
    llm_config = configuration.get_llm_config()
    client = llm_client or create_llm_client(configuration)
    return GenerationOrchestrator(
        client,
        chat_conf=configuration.get_chat_service_config(),
        tools_enabled=bool(llm_config.get("tools_enabled", True)),
    )


def build_conversation_manager(
    configuration: Configuration,
    llm_client: LLMBackend | None = None,
    store: KeyValueStore | None = None,
) -> ConversationManager:
    """Wire store, repository, service and orchestrator from configuration."""
    storage_config = configuration.get_chat_storage_config()
    repository = ConversationRepository(
        store or create_key_value_store(storage_config),
        ttl_seconds=configuration.get_conversation_ttl_seconds(),
        key_prefix=storage_config.get("key_prefix", DEFAULT_KEY_PREFIX),
    )
    return ConversationManager(
        ConversationService(repository),
        create_generator(configuration, llm_client),
        history_limit=configuration.get_history_limit(),
    )


async def _reply(manager: ConversationManager, user_id: str, context: str, message: str) -> None:
    try:
        async for item in manager.stream_reply(user_id, context, message):
            if isinstance(item, GenerationMetadata):
                logger.info(
                    "Reply from %s: %d prompt tokens, %d output tokens",
                    item.model_used,
                    item.prompt_eval_count,
                    item.eval_count,
                )
            else:
                print(item, end="", flush=True)
        print()
    except ServiceUnavailableError as e:
        print(f"\n{e}", file=sys.stderr)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="yumeoi", description="Chat with the Yumeoi companion.")
    parser.add_argument("message", nargs="?", help="Send one message and exit")
    parser.add_argument("--user", default="local-user", help="User id for the conversation")
    parser.add_argument("--context", default="chat", help="Conversation context")
    parser.add_argument("--config", default=None, help="YAML file merged over the defaults")
    return parser.parse_args(argv)


# Configure logging for the application
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")


async def main(argv: list[str] | None = None) -> None:
    """Main entry point - one-shot message or interactive loop."""
    args = _parse_args(argv)
    config = Configuration(args.config)

    logging_config = config.get_logging_config()
    if "format" in logging_config:
        for handler in logging.getLogger().handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.setFormatter(logging.Formatter(logging_config["format"]))
    _configure_advanced_logging(logging_config)

    llm_client = create_llm_client(config)
    manager = build_conversation_manager(config, llm_client)
    store = manager.conversation_service.repository.store

    try:
        if args.message:
            await _reply(manager, args.user, args.context, args.message)
            return

        while True:
            try:
                message = await asyncio.to_thread(input, "> ")
            except EOFError:
                break
            text = message.strip()
            if not text:
                continue
            if text in {"exit", "quit"}:
                break
            await _reply(manager, args.user, args.context, text)
    finally:
        await llm_client.close()
        await store.close()
        logger.info("Application shutdown complete")


def run() -> None:
    """Synchronous CLI entrypoint that runs the async main."""
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())


if __name__ == "__main__":
    run()
