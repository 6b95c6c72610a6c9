# common/orchestrator.py
# -*- coding: utf-8 -*-
"""
Runs the bootstrap steps in sequence and stops the container start at the
first failure.
"""

import logging
import sys
from typing import Any, Callable, Dict, List, NoReturn, Optional

from bootstrap.errors import BootstrapError


class Orchestrator:
    """Ordered list of named steps sharing one settings object."""

    def __init__(
        self,
        app_settings: Any,
        orchestrator_logger: Optional[logging.Logger] = None,
    ):
        self.app_settings = app_settings
        self.logger = orchestrator_logger or logging.getLogger(__name__)
        self.steps: List[Dict[str, Any]] = []
        # Step return values, keyed by "<step name>_result"
        self.context: Dict[str, Any] = {}

    def add_step(
        self,
        name: str,
        func: Callable,
        kwargs: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Queue a step.

        Args:
            name: Name used in log lines and as the context key.
            func: Called as ``func(**kwargs, app_settings=...)``.
            kwargs: Extra keyword arguments for the step.
        """
        self.steps.append(
            {
                "name": name,
                "func": func,
                "kwargs": kwargs or {},
            }
        )
        self.logger.debug(f"Step '{name}' added to the queue.")

    def run(self) -> bool:
        """
        Execute all queued steps in order.

        A failing step terminates the process with exit status 1.

        Returns:
            True once every step has run.
        """
        total = len(self.steps)
        for position, step in enumerate(self.steps, start=1):
            step_name = step["name"]
            self.logger.info(f"--- Step {position}/{total}: {step_name} ---")
            try:
                result = step["func"](
                    **step["kwargs"], app_settings=self.app_settings
                )
            except BootstrapError as e:
                self.logger.critical(f"🔥 Step '{step_name}' failed: {e}")
                self._abort()
            except Exception as e:
                self.logger.critical(
                    f"🔥 Step '{step_name}' failed: {e}", exc_info=True
                )
                self._abort()
            self.context[f"{step_name}_result"] = result
            self.logger.debug(f"Step '{step_name}' completed.")

        self.logger.info("✨ All bootstrap steps completed.")
        return True

    def _abort(self) -> NoReturn:
        self.logger.error("A fatal error occurred. Exiting...")
        sys.exit(1)
