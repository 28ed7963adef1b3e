"""
Pydantic models for OCR provider output.

A RawDocument is the full recognized text plus the page → block → paragraph
tree the provider reports. Only paragraph confidences are kept from the tree;
the extraction heuristics work on the text alone.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class Paragraph(BaseModel):
    """A recognized paragraph with optional provider confidence in [0, 1]."""
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    model_config = {"frozen": True}


class Block(BaseModel):
    paragraphs: List[Paragraph] = Field(default_factory=list)

    model_config = {"frozen": True}


class Page(BaseModel):
    blocks: List[Block] = Field(default_factory=list)

    model_config = {"frozen": True}


class RawDocument(BaseModel):
    """Text and layout metadata returned by one OCR call."""
    text: str = ""
    pages: List[Page] = Field(default_factory=list)

    model_config = {"frozen": True}

    @classmethod
    def from_vision_annotation(cls, annotation: Optional[Dict[str, Any]]) -> "RawDocument":
        """
        Build a document from a Google-Vision-style ``fullTextAnnotation`` mapping.

        Missing keys are treated as empty; paragraph confidences that are not
        numbers are dropped rather than coerced.
        """
        annotation = annotation or {}
        pages = []
        for page in annotation.get("pages") or []:
            blocks = []
            for block in page.get("blocks") or []:
                paragraphs = []
                for para in block.get("paragraphs") or []:
                    confidence = para.get("confidence")
                    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
                        confidence = None
                    paragraphs.append(Paragraph(confidence=confidence))
                blocks.append(Block(paragraphs=paragraphs))
            pages.append(Page(blocks=blocks))

        return cls(text=annotation.get("text") or "", pages=pages)
