"""Provider failover gateway.

Relays a chat message to interchangeable upstream LLM providers with:
  - Provider Registry (credential filtering, priority ordering)
  - Fixed-window Rate Limiter (per client address)
  - Provider Adapters (chat-completion and generic text-generation)
  - Failover Orchestrator (sequential attempts, uniform result)
"""
