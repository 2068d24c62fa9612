"""
This module contains the IOInterface abstract base class and its implementations.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor

import aiofiles


class IOInterface(ABC):
    """
    Abstract base class for an IO interface.

    This class defines the interface for line-based input/output used by the
    console adapter.
    """

    @abstractmethod
    def output(self, message: str) -> None:
        """Output a message to the interface."""
        pass

    @abstractmethod
    def input(self, prompt: str) -> str:
        """Get input from the user with a prompt."""
        pass


class TestIOInterface(IOInterface):
    """
    A test IO interface for testing purposes. Collects output messages and
    answers prompts from a queue of canned responses.

    Methods
    -------
    def output(self, message):
        Collect an output message.

    def input(self, prompt):
        Return the next queued response.

    def add_input(self, response):
        Queue a response for a later prompt.
    """

    __test__ = False

    def __init__(self, input_responses: list[str] | None = None):
        self.sent_messages: list[str] = []
        self.prompts: list[str] = []
        self.input_responses = list(input_responses or [])

    def output(self, message: str) -> None:
        self.sent_messages.append(message)

    def input(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.input_responses:
            return self.input_responses.pop(0)
        raise EOFError("No more input queued in TestIOInterface.")

    def add_input(self, response: str) -> None:
        """Queue a response for a later prompt."""
        self.input_responses.append(response)


class ConsoleIOInterface(IOInterface):
    """
    A console IO interface for interactive gameplay.
    """

    def output(self, message: str) -> None:
        print(message)

    def input(self, prompt: str) -> str:
        return input(prompt)


class LoggingIOInterface:
    """
    Writes output messages to a log file.

    The console adapter uses it to keep a transcript of a game next to the
    interactive console.
    """

    def __init__(self, log_file_path: str):
        self.log_file_path = log_file_path

    async def output_async(self, message: str) -> None:
        """Append a line to the log file."""
        async with aiofiles.open(
            self.log_file_path, mode="a", encoding="utf-8"
        ) as log_file:
            await log_file.write(message + "\n")


class AsyncIOInterfaceWrapper:
    """
    A wrapper class to facilitate asynchronous input from an IOInterface
    implementation. This class uses a ThreadPoolExecutor to run the blocking read
    in a separate thread, so it can be awaited with a timeout.
    """

    def __init__(self, io_interface: IOInterface):
        self.io_interface = io_interface
        self.executor = ThreadPoolExecutor(max_workers=1)

    async def input(self, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            self.executor, self.io_interface.input, prompt
        )
        return result

    def close(self) -> None:
        self.executor.shutdown(wait=False)
