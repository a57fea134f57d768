from __future__ import annotations


class MemeError(Exception):
    """Base class for failures that end one render but leave the engine usable."""


class TemplateNotFound(MemeError):
    def __init__(self, template_id: str) -> None:
        super().__init__(f"Template '{template_id}' not found")
        self.template_id = template_id


class ImageLoadFailure(MemeError):
    pass


class FontLoadFailure(MemeError):
    pass


class EncodingFailure(MemeError):
    pass


class RenderCancelled(MemeError):
    pass
