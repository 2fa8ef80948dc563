#!/usr/bin/env python3
"""
Interactive CLI demo for the tag autocompletion service.

Reads tag prompts from stdin and prints the corrected prompt. The search
service must be running at TAG_AUTOCOMPLETE_API_ENDPOINT and the LLM
provider key must be set (see .env).
"""
import argparse
import asyncio
import logging

from dotenv import load_dotenv

# Imports assume PYTHONPATH=src is set (e.g., PYTHONPATH=src python demo/cli_demo.py)
from tag_autocompletion.app import TagAutocompletionApp
from tag_autocompletion.config_loader import load_config_from_env
from tag_autocompletion.context.generation_context import GenerationContext
from tag_autocompletion.coordination.profile_lease import InMemoryProfileSwitch
from tag_autocompletion.models import GenerationMode

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


def print_banner(mode: GenerationMode):
    """Print welcome banner."""
    print("\n" + "=" * 60)
    print("  Tag Autocompletion - Interactive CLI Demo")
    print("=" * 60)
    print(f"\nMode: {mode.name}")
    print("Enter a comma-separated tag prompt, e.g.:")
    print("  blonde hair, padded_room, bright_lighting")
    print("\nType 'quit' or 'exit' to end the session.")
    print("-" * 60 + "\n")


def setup_app() -> TagAutocompletionApp:
    """Set up and initialize the app with an in-memory profile switch."""
    print("🚀 Initializing tag autocompletion...")

    config = load_config_from_env()
    config.enabled = True

    profile_switch = InMemoryProfileSwitch(
        profiles=["default", config.profile_name],
        active="default",
    )
    app = TagAutocompletionApp(config, profile_switch)
    app.initialize()
    print("✅ Ready!\n")
    return app


async def run_loop(app: TagAutocompletionApp, mode: GenerationMode) -> None:
    check = await app.check_connection()
    print(f"🔌 Search service: {check.message}\n")

    while True:
        try:
            prompt = input("Prompt: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\n👋 Goodbye!\n")
            break

        if not prompt:
            continue
        if prompt.lower() in ['quit', 'exit', 'q']:
            print("\n👋 Goodbye!\n")
            break

        corrected = await app.correct_prompt(prompt, mode, GenerationContext(prompt=prompt))
        status = app.status()
        print(f"\n🏷️  Original:  {prompt}")
        print(f"✨ Corrected: {corrected}")
        print(f"⚡ Oracle: {status['oracle_calls']} calls, {status['oracle_latency_ms']}ms")
        print("-" * 60)

    await app.aclose()


def main():
    parser = argparse.ArgumentParser(description="Correct tag prompts interactively")
    parser.add_argument(
        "--mode",
        default="FREE",
        choices=[mode.name for mode in GenerationMode],
        help="Generation mode used to pick the selection context",
    )
    args = parser.parse_args()
    mode = GenerationMode[args.mode]

    print_banner(mode)

    try:
        app = setup_app()
    except Exception as e:
        print(f"\n❌ Failed to initialize: {e}")
        print("Please check your environment variables and configuration.")
        return 1

    asyncio.run(run_loop(app, mode))
    return 0


if __name__ == "__main__":
    import sys
    sys.exit(main())
