"""
Abstract Base Class for Segmentation Steps

This module provides the base class that all segmentation steps inherit from.
It standardizes the interface and provides timing, error logging and the
optional debug trace.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..config import ParserConfig


class BaseParsingStep(ABC):
    """Abstract base class for all segmentation steps."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        parser_config: Optional[ParserConfig] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the step.

        Args:
            config: Step tunables, overriding the module defaults
            parser_config: Read-only configuration shared by all steps
            logger: Logger to write to; defaults to one named after the step
        """
        self.config = config or {}
        self.parser_config = parser_config or ParserConfig()
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.setup()

    def setup(self):
        """
        Setup method called after initialization.
        Override this method to read step-specific tunables.
        """
        # Default implementation - no setup required

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """
        Get a tunable with a fallback default.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return self.config.get(key, default)

    @property
    def tracing(self) -> bool:
        return self.parser_config.debug

    def trace(self, message: str):
        """Write a debug-trace record when the debug flag is set."""
        if self.parser_config.debug:
            self.logger.debug(f"[{self.__class__.__name__}] {message}")

    @abstractmethod
    def process(self, *inputs: Any) -> Any:
        """
        Main processing method that each step must implement.

        Args:
            inputs: The outputs of the previous steps this step consumes

        Returns:
            The processed output data
        """
        pass

    def execute(self, *inputs: Any) -> Any:
        """
        Execute the step with timing and error handling.

        Args:
            inputs: The input data for this step

        Returns:
            The processed output data
        """
        step_name = self.__class__.__name__
        self.logger.debug(f"Starting {step_name}")

        start_time = time.time()

        try:
            result = self.process(*inputs)
            execution_time = time.time() - start_time

            self.logger.debug(
                f"{step_name} completed successfully in {execution_time:.4f}s"
            )

            if self.tracing:
                self._log_step_result(result)

            return result

        except Exception as e:
            execution_time = time.time() - start_time
            self.logger.error(
                f"{step_name} failed after {execution_time:.4f}s: {str(e)}"
            )
            raise

    def _log_step_result(self, result: Any):
        """
        Log the result of the step processing.
        Override this method to provide step-specific trace output.

        Args:
            result: The result to log
        """
        self.trace(f"Step result type: {type(result).__name__}")
