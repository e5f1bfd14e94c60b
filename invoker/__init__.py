"""Workflow worker invocation with an audited result trail.

Entry points:
- ``invoker.invocation.InvocationPipeline`` sends one worker call
- ``invoker.workflows.run_api_test`` tests a workflow and notifies the operator
- ``invoker.factory`` wires store, notifier and lock together
"""

__all__ = ["audit", "invocation", "notify", "workflows", "factory"]
