"""
run_relay.py: End-to-end smoke check of the provider failover chain.

Runs the whole pipeline in one go, without starting the HTTP server:
  1. Load provider credentials from the environment / .env
  2. Report which providers are eligible
  3. Send one message through the failover orchestrator
  4. Print the winning provider, or every failure if all providers failed

Usage:
    python run_relay.py "Explain failover in one paragraph"
"""

import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s: %(message)s",
)

DEFAULT_MESSAGE = "Hello JARVIS, introduce yourself in two sentences."


async def main(message: str) -> int:
    from relay.core.config import settings
    from relay.gateway.errors import AggregateFailure, RelayError
    from relay.gateway.orchestrator import FailoverOrchestrator
    from relay.gateway.rate_limiter import RateLimiter
    from relay.gateway.registry import ProviderRegistry
    from relay.gateway.types import ChatRequest

    # ── Step 1: Providers ────────────────────────────────────
    print("\n" + "=" * 60)
    print("  Step 1: Providers")
    print("=" * 60)

    registry = ProviderRegistry.from_settings(settings)
    eligible = {p.name for p in registry.eligible_providers_sorted_by_priority()}
    for p in sorted(registry.providers, key=lambda p: p.priority):
        mark = "✓" if p.name in eligible else "✗"
        print(f"  {mark} [{p.priority}] {p.name:24s} {p.capability.value:16s} {p.model or '-'}")
    print(f"  APIs configured: {registry.eligible_count()}/{registry.total_count}")

    if not eligible:
        print("\n  ❌ No provider has a valid API key. Set GROQ_API_KEY, DEEPSEEK_API_KEY, ...")
        return 1

    # ── Step 2: Chat ─────────────────────────────────────────
    print("\n" + "=" * 60)
    print("  Step 2: Chat")
    print("=" * 60)

    orchestrator = FailoverOrchestrator(
        registry=registry,
        rate_limiter=RateLimiter(limit=settings.rate_limit_requests),
        timeout=settings.upstream_timeout_seconds,
        user_agent=settings.user_agent,
    )

    try:
        result = await orchestrator.handle(ChatRequest(message=message), client_id="cli")
    except AggregateFailure as e:
        print(f"\n  ❌ {e.error}")
        for f in e.failures:
            print(f"    {f.provider}: [{f.error_code}] {f.message}")
        return 1
    except RelayError as e:
        print(f"\n  ❌ {e.error}: {e.message}")
        return 1

    print(f"  ✓ Provider: {result.provider} ({result.model})")
    print(f"  ✓ Time:     {result.processing_time_ms} ms")
    print("\n" + result.response)
    return 0


if __name__ == "__main__":
    text = " ".join(sys.argv[1:]) or DEFAULT_MESSAGE
    sys.exit(asyncio.run(main(text)))
