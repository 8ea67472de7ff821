"""Shared test fixtures — interchangeable demo providers."""

from __future__ import annotations

import asyncio

import pytest


class Animal:
    """Async provider: every animal can ``speak``."""

    legs = 4

    def __init__(self, sound: str = "...", pace: float = 0.01) -> None:
        self.sound = sound
        self.pace = pace
        self.calls = 0

    async def speak(self) -> str:
        self.calls += 1
        await asyncio.sleep(self.pace)
        return self.sound

    def name(self, prefix: str = "") -> str:
        self.calls += 1
        return f"{prefix}{type(self).__name__.lower()}"


class Cat(Animal):
    def __init__(self) -> None:
        super().__init__("meow")


class Dog(Animal):
    def __init__(self) -> None:
        super().__init__("woof")


class Cockroach(Animal):
    legs = 6

    async def speak(self) -> str:
        self.calls += 1
        raise RuntimeError("A cockroach doesn't speak, it flies")

    def name(self, prefix: str = "") -> str:
        self.calls += 1
        raise RuntimeError("A cockroach has no name")


class Parrot(Animal):
    """Answers synchronously, even to ``speak``."""

    def __init__(self) -> None:
        super().__init__("hello")

    def speak(self) -> str:  # type: ignore[override]
        self.calls += 1
        return self.sound


@pytest.fixture
def cat() -> Cat:
    return Cat()


@pytest.fixture
def dog() -> Dog:
    return Dog()


@pytest.fixture
def cockroach() -> Cockroach:
    return Cockroach()
