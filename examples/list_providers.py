#!/usr/bin/env python3
"""
Provider Catalog Demo

Prints every registered provider with its models, then optionally checks
API keys and builds a client for one provider.

Usage:
    # Show the catalog
    python examples/list_providers.py

    # Check a key and create an LLM client
    OPENAI_API_KEY=sk-... python examples/list_providers.py --check openai

    # Pretend to be a UI process (local Whisper is unavailable there)
    python examples/list_providers.py --renderer --check whisper
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.table import Table

from voiceproviders import (
    PROVIDERS,
    ExecutionContext,
    UnsupportedProviderError,
    create_llm,
    create_stt,
    get_available_providers,
)

console = Console()

KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "openai-glass": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "soniox": "SONIOX_API_KEY",
}


def show_catalog():
    """Render the registry as a table."""
    available = get_available_providers()
    table = Table(title="Registered providers")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("LLM models")
    table.add_column("STT models")

    for provider_id, provider in PROVIDERS.items():
        llm = ", ".join(m.id for m in provider.llm_models) or "[dim]-[/dim]"
        stt = ", ".join(m.id for m in provider.stt_models) or "[dim]-[/dim]"
        table.add_row(provider_id, provider.name, llm, stt)

    console.print(table)
    console.print(f"[green]STT:[/green] {', '.join(available.stt)}")
    console.print(f"[blue]LLM:[/blue] {', '.join(available.llm)}")


async def check(provider_id: str, context: ExecutionContext):
    """Validate the provider's key and build its clients."""
    entry = PROVIDERS.get(provider_id)
    if entry is None:
        console.print(f"[red]Unknown provider:[/red] {provider_id}")
        return

    module = entry.handler(context)
    result = await module.validate_api_key(os.environ.get(KEY_ENV.get(provider_id, ""), ""))
    status = "[green]ok[/green]" if result.success else f"[red]{result.error}[/red]"
    console.print(f"Key check for {entry.name}: {status}")

    for label, factory, models in (
        ("LLM", create_llm, entry.llm_models),
        ("STT", create_stt, entry.stt_models),
    ):
        opts = {"model": models[0].id} if models else {}
        try:
            client = factory(provider_id, opts, context=context)
        except (UnsupportedProviderError, RuntimeError) as exc:
            console.print(f"[yellow]{label}:[/yellow] {exc}")
            continue
        console.print(f"[green]{label}:[/green] {type(client).__name__} ({opts.get('model', 'default')})")


def main():
    parser = argparse.ArgumentParser(description="Provider catalog demo")
    parser.add_argument("--check", metavar="PROVIDER", help="Validate and build clients for PROVIDER")
    parser.add_argument("--renderer", action="store_true", help="Run as a renderer (UI) process")
    args = parser.parse_args()

    show_catalog()

    if args.check:
        context = ExecutionContext.RENDERER if args.renderer else ExecutionContext.MAIN
        asyncio.run(check(args.check, context))


if __name__ == "__main__":
    main()
