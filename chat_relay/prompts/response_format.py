"""Instruction templates asking the model to prefer a reply format."""

from ..models.enums import ResponseFormat

RESPONSE_FORMAT_INSTRUCTIONS: dict[ResponseFormat, str] = {
    ResponseFormat.TEXT: "Respond in plain prose. Do not use markdown, code fences or tables.",
    ResponseFormat.JSON: "Always respond with valid JSON. No extra text.",
    ResponseFormat.CODE: (
        "Respond only with code inside a single fenced code block tagged with its language. "
        "No explanation outside the block."
    ),
    ResponseFormat.MARKDOWN: "Format the response as markdown using headings, lists and emphasis where useful.",
    ResponseFormat.TABLE: (
        "Respond with a markdown table only: a header row, a separator row such as "
        "| --- | --- |, then one row per item."
    ),
    ResponseFormat.MIXED: (
        "Explain in prose and put every code sample in a fenced code block tagged with its language."
    ),
    ResponseFormat.RAW: "Respond with the raw content only, without formatting or commentary.",
}


def build_system_prompt(
    response_format: ResponseFormat | None = None,
    system_prompt: str | None = None,
) -> str | None:
    """Combine caller instructions with the format template.

    Returns ``None`` when neither part is present so callers can skip the
    synthesized system message entirely.
    """
    parts = []
    if system_prompt and system_prompt.strip():
        parts.append(system_prompt.strip())
    if response_format is not None:
        parts.append(RESPONSE_FORMAT_INSTRUCTIONS[response_format])
    return "\n\n".join(parts) or None
