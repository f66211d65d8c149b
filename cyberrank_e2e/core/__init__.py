"""
Core package: error taxonomy, condition polling and bounded action retries.

Consumers import submodules directly, e.g.:
  from cyberrank_e2e.core.waits import WaitSpec, poll_until
  from cyberrank_e2e.core.retry import retry_action, attempt_action
"""

__all__: list[str] = []
