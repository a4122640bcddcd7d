"""
Incremental patching of existing model files.

The patcher fills gaps in a model file without touching what is already
there. Each structural piece (doc block, ``$table``, ``$fillable``,
``$casts``) is an :class:`InsertionStep`: a marker that says the piece is
already present, the text to insert, and an ordered list of anchors saying
where it goes. Anchors are searched in the current text after every
insertion, so later steps see the result of earlier ones. Relationship
methods are appended before the class's closing brace when no method of the
same name (ignoring case) exists.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern, Tuple

from .codegen import ModelFragments
from .domain.models import ChangeKind


logger = logging.getLogger(__name__)

CLASS_DECLARATION_RE = re.compile(
    r"^[ \t]*(?:(?:final|abstract|readonly)\s+)*class\s+\w+", re.IGNORECASE | re.MULTILINE
)
DOC_BLOCK_RE = re.compile(r"/\*\*")
TABLE_RE = re.compile(r"protected\s+\$table\s*=\s*[^;]*;", re.IGNORECASE)
FILLABLE_RE = re.compile(r"protected\s+\$fillable\s*=\s*\[.*?\]\s*;", re.IGNORECASE | re.DOTALL)
CASTS_RE = re.compile(r"protected\s+\$casts\s*=", re.IGNORECASE)
FILLABLE_MARKER_RE = re.compile(r"protected\s+\$fillable\s*=", re.IGNORECASE)
TABLE_MARKER_RE = re.compile(r"protected\s+\$table\s*=", re.IGNORECASE)


# --- Anchors: each returns an insertion offset or None ---

Anchor = Callable[[str], Optional[int]]


def before_class_declaration(text: str) -> Optional[int]:
    match = CLASS_DECLARATION_RE.search(text)
    return match.start() if match else None


def after_class_body_open(text: str) -> Optional[int]:
    match = CLASS_DECLARATION_RE.search(text)
    if not match:
        return None
    brace = text.find("{", match.end())
    return brace + 1 if brace != -1 else None


def after_match(pattern: Pattern) -> Anchor:
    def anchor(text: str) -> Optional[int]:
        match = pattern.search(text)
        return match.end() if match else None
    return anchor


def before_final_brace(text: str) -> Optional[int]:
    index = text.rfind("}")
    return index if index != -1 else None


@dataclass(frozen=True)
class InsertionStep:
    """One structural piece of a model file and where it belongs."""

    name: str
    marker: Pattern
    fragment: Optional[str]
    anchors: Tuple[Anchor, ...]
    prefix: str = ""
    suffix: str = ""

    def apply(self, text: str) -> Optional[str]:
        """Return the patched text, or None when the step does not fire."""
        if not self.fragment or self.marker.search(text):
            return None
        for anchor in self.anchors:
            position = anchor(text)
            if position is not None:
                return text[:position] + self.prefix + self.fragment + self.suffix + text[position:]
        logger.warning(f"No place found to insert {self.name}; leaving it out.")
        return None


def method_pattern(method_name: str) -> Pattern:
    return re.compile(r"function\s+" + re.escape(method_name) + r"\s*\(", re.IGNORECASE)


class IncrementalPatcher:
    """Adds the pieces of a model that an existing file is missing."""

    def structural_steps(self, fragments: ModelFragments) -> List[InsertionStep]:
        return [
            InsertionStep(
                name="doc block",
                marker=DOC_BLOCK_RE,
                fragment=fragments.doc_block,
                anchors=(before_class_declaration,),
                suffix="\n",
            ),
            InsertionStep(
                name="$table",
                marker=TABLE_MARKER_RE,
                fragment=fragments.table_property,
                anchors=(after_class_body_open,),
                prefix="\n",
                suffix="\n",
            ),
            InsertionStep(
                name="$fillable",
                marker=FILLABLE_MARKER_RE,
                fragment=fragments.fillable_property,
                anchors=(after_match(TABLE_RE), after_class_body_open),
                prefix="\n\n",
            ),
            InsertionStep(
                name="$casts",
                marker=CASTS_RE,
                fragment=fragments.casts_property,
                anchors=(after_match(FILLABLE_RE), after_class_body_open),
                prefix="\n\n",
            ),
        ]

    def patch(self, existing_text: str, fragments: ModelFragments) -> Tuple[str, ChangeKind]:
        """
        Patch ``existing_text`` with whatever ``fragments`` it lacks.

        Returns the new text and what changed. Running the patch again on
        its own output is a no-op.
        """
        text = existing_text
        structural_added = False
        methods_added = False

        for step in self.structural_steps(fragments):
            patched = step.apply(text)
            if patched is not None:
                logger.debug(f"Inserted {step.name}")
                text = patched
                structural_added = True

        for method_name, body in fragments.relationship_methods.items():
            step = InsertionStep(
                name=f"method {method_name}()",
                marker=method_pattern(method_name),
                fragment=body,
                anchors=(before_final_brace,),
                prefix="\n",
                suffix="\n",
            )
            patched = step.apply(text)
            if patched is not None:
                logger.debug(f"Inserted relationship method {method_name}()")
                text = patched
                methods_added = True

        if methods_added:
            return text, ChangeKind.UPDATED_WITH_RELATIONSHIPS
        if structural_added:
            return text, ChangeKind.COMPLETED
        return text, ChangeKind.NO_CHANGE
