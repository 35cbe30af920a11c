"""Prompt templates.

All functions are pure: they only render strings from their arguments.
"""

from threadcraft.entities import ExtractedContentEntity

SOCIAL_SYSTEM_PROMPT = "You generate concise social content following platform best practices."

ANALYSIS_SYSTEM_PROMPT = (
    "You are a precise research-paper analyst. Return ONLY valid JSON per the user's schema. "
    "If information is unavailable, leave empty string or []."
)

THREAD_STYLES = {
    "viral": (
        "Viral style: short, punchy, curiosity-driven hooks, strong emotional resonance, "
        "occasional emoji allowed, but avoid spammy clickbait."
    ),
    "regular": (
        "Regular style: informative, clear, numbered tweets with concise value in each. "
        "No hashtags inside tweets."
    ),
}

TONES = {
    "engaging": "Tone: engaging, energetic, accessible. Use simple language.",
    "professional": "Tone: professional, concise, credible. Avoid slang.",
}

PAPER_SCHEMA = """{
  "metadata": { "title": string, "authors": string[], "venue_year": string, "link": string, "code_or_data": string },
  "core_contribution": string,
  "innovations_methodology": string[],
  "significance": { "classification": "Fundamental Advance" | "Significant Increment" | "Niche Contribution" | string, "justification": string },
  "limitations": string[],
  "open_questions": string[],
  "plain_english_summary": string
}"""


def _industry_context(industry: str) -> str:
    if industry != "general":
        return (
            f"Industry context: The audience works in {industry}. "
            "Tailor examples and terminology accordingly."
        )
    return "Industry context: General audience; avoid niche jargon."


def build_social_prompt(
    content: ExtractedContentEntity,
    thread_type: str = "regular",
    tone: str = "professional",
    industry: str = "general",
) -> str:
    """Render the X thread + LinkedIn post instruction for an article.

    Args:
        content: Extracted article content (text already truncated)
        thread_type: "regular" or "viral"
        tone: "professional" or "engaging"
        industry: Audience industry, "general" for none

    Returns:
        Prompt text ending with the required JSON output schema
    """
    return f"""
Source:
- Title: {content.title}
- Site: {content.site_name or "Unknown"}
- URL: {content.url}
- Description: {content.description or "n/a"}
- Excerpt:
{content.text}

Guidelines:
- {THREAD_STYLES.get(thread_type, THREAD_STYLES["regular"])}
- {TONES.get(tone, TONES["professional"])}
- {_industry_context(industry)}

Tasks:
1) Create an X thread of up to 4 tweets. Each tweet MUST BE ≤ 280 chars (CRITICAL), strong hook, concrete insights, and END each tweet with the thread emoji and count (🧵 1/4, 🧵 2/4, 🧵 3/4, 🧵 4/4). The FINAL tweet (4/4) must include: the original article link, 3 highly relevant well-known accounts to tag (research based on article topic and industry), and 2-3 relevant hashtags. Keep content concise to fit character limits.
2) Create a LinkedIn post 1300–1700 chars, {tone} tone, using PLAIN TEXT ONLY (no markdown formatting), professional emojis for visual appeal, 3 actionable insights, include the original source URL, closing CTA, and 3-5 relevant hashtags at the end.

Return JSON ONLY with keys:
{{
  "thread": ["tweet1", "tweet2", "tweet3", "tweet4"],
  "linkedin": "full post text"
}}
""".strip()


def build_url_analysis_prompt(url: str) -> str:
    """Ask the model to read a paper by URL and fill the analysis schema."""
    return f"""
You will fetch and read the research paper available at this URL and output ONLY JSON (no markdown fences) that matches exactly this schema:
{PAPER_SCHEMA}
Constraints:
- Fill fields from the paper. If unknown, use empty string or [].
- metadata.link must be "{url}".
- Return only the JSON object.

URL: {url}
""".strip()


def build_document_analysis_prompt(encoded_pdf: str, source_url: str | None = None) -> str:
    """Ask the model to read a base64-encoded PDF and fill the analysis schema.

    Args:
        encoded_pdf: Base64 PDF payload (possibly truncated, with marker)
        source_url: Where the PDF came from, if known

    Returns:
        Prompt text with the payload appended after a PDF_BASE64 label
    """
    if source_url:
        link_rule = f'metadata.link must be "{source_url}".'
    else:
        link_rule = 'If a source link is not known, set metadata.link to "".'

    return f"""
A research paper PDF is provided as base64 below. Read it and output ONLY JSON that matches exactly this schema:
{PAPER_SCHEMA}
Constraints:
- Fill fields from the paper. If unknown, use empty string or [].
- {link_rule}
- If the payload ends with a [truncated] marker, analyze the available portion.
- Return only the JSON object.

PDF_BASE64:
{encoded_pdf}
""".strip()
