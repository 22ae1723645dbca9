"""Prompt catalogue, versioned lookup and assembly."""

from .builder import ContextBlock, ContextKind, build, render_template
from .catalog import (
    OperationSpec,
    PromptTemplate,
    default_prompt,
    operation_spec,
    prompt_name_for,
)
from .store import CachingPromptStore, PromptStore, ResolvedPrompt, StoredPrompt, resolve_prompt

__all__ = [
    "CachingPromptStore",
    "ContextBlock",
    "ContextKind",
    "OperationSpec",
    "PromptStore",
    "PromptTemplate",
    "ResolvedPrompt",
    "StoredPrompt",
    "build",
    "default_prompt",
    "operation_spec",
    "prompt_name_for",
    "render_template",
    "resolve_prompt",
]
