"""OpenRouter API Gateway Layer.

Synchronous client for schema-constrained chat completions with:
  - Typed error taxonomy (retryable vs permanent)
  - Success/failure response envelope
  - Process-wide or injected configuration
  - Single-attempt request executor (httpx)
  - Retry orchestrator (exponential backoff, Retry-After aware)
"""
