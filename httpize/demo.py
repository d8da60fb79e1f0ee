"""Small provider used by the ``httpize-demo`` entry point.

``/Echo?name=Gopher`` answers ``Echo Gopher``, ``/Greeting`` answers
``Hello World`` and ``/ThreeOhThree`` redirects to ``http://lookhere``.
"""

from __future__ import annotations

import io
from typing import Optional

from .args import SafeString
from .errors import ApplicationError
from .registry import ApiProvider, Methods
from .settings import MethodResult, Settings


class DemoApi(ApiProvider):
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings

    def httpize(self, methods: Methods) -> None:
        methods.add("Echo", ["name"], [SafeString])
        methods.add("Greeting", [], [])
        methods.add("ThreeOhThree", [], [])

    def Echo(self, name: SafeString) -> MethodResult:
        return MethodResult(io.BytesIO(f"Echo {name}".encode()), self.settings, None)

    def Greeting(self) -> MethodResult:
        return MethodResult(io.BytesIO(b"Hello World"), self.settings, None)

    def ThreeOhThree(self) -> MethodResult:
        return MethodResult(None, None, ApplicationError(303, "See Other", "http://lookhere"))


__all__ = ["DemoApi"]
