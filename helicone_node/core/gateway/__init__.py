"""Helicone gateway integration layer.

This package stays small:
- No header, prompt or completion logging (headers carry provider API keys).
- Configured via environment variables.
- Each request is built and sent independently; nothing is cached locally.
"""
