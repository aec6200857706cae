"""Grounding instructions sent with every question.

Grounding is enforced by instruction only: the model is told to answer from
the supplied document text and nothing else. Replies are not checked against
the source afterwards.

Templates are versioned. A new version may reword anything, but must keep
the fallback phrase verbatim, forbid outside facts, and (structured mode)
keep the Markdown section layout.
"""

from dataclasses import dataclass

FALLBACK_REPLY = "Answer not found in the provided document."


@dataclass(frozen=True)
class PromptSet:
    """One version of the plain and structured system prompts."""

    version: str
    plain: str
    structured: str


PROMPTS_V1 = PromptSet(
    version="v1",
    plain=(
        "You are a document-based assistant. Answer using only the provided document text. "
        "Do NOT use outside knowledge or introduce facts that are not in the document. "
        f'If the answer cannot be found in the document, reply exactly: "{FALLBACK_REPLY}" '
        "Keep responses concise."
    ),
    structured=f"""You are an expert assistant that MUST ONLY use the provided document text to answer.
Your output must be in Markdown and must include (in this order):
1) A single-line **Title**.
2) **Summary** (2-3 bullets).
3) **Key Points** (bullet list, max 10 items).
4) **Step-by-step** or **Procedure** section if applicable.
5) **Action Items** (clear, numbered steps a user can follow).
6) A short **One-line TL;DR** at the end.
If the document does not contain an answer, return exactly: "{FALLBACK_REPLY}"
Do NOT invent facts or use outside knowledge. Keep answers concise and well-structured.""",
)

PROMPT_VERSIONS: dict[str, PromptSet] = {PROMPTS_V1.version: PROMPTS_V1}


def get_prompt_set(version: str) -> PromptSet:
    """Look up a prompt version.

    Raises:
        ValueError: If the version is unknown
    """
    try:
        return PROMPT_VERSIONS[version]
    except KeyError as e:
        known = ", ".join(sorted(PROMPT_VERSIONS))
        raise ValueError(f"Unknown prompt_version {version!r} (known: {known})") from e
