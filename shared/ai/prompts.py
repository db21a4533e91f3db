from typing import List, Optional

TAILOR_INTRO = (
    "You are a precise LaTeX resume tailoring assistant. Your task is to rewrite a resume "
    "so that it targets a specific job while keeping the document compilable."
)

TAILOR_INTRO_WITH_CONTEXT = (
    "You are a precise LaTeX resume tailoring assistant. Your task is to rewrite a resume to "
    "target a specific job, using a narrative context for the details."
)

CONTEXT_OVERVIEW = [
    "## Task & Inputs Overview",
    "You will be given three inputs:",
    "1.  **Current LaTeX resume (`base`):** This is the .tex file to be edited. You MUST preserve its structure, macros, and preamble.",
    "2.  **Job Description (`jd`):** This is the target. You will use its keywords and requirements as a *filter*.",
    "3.  **Experience Context (`story`):** This is a narrative of past experiences. This is your *source of truth* for accomplishments, metrics, and project details.",
]

CONTEXT_RULES = [
    "- Use the **Experience Context** as the primary source to understand *what* was done. Extract the most impactful achievements, metrics, and technical details from this story.",
    "- Use the **Job Description** to *select, filter, and prioritize* the details from the Experience Context. If the JD values 'scalability', pull scalability metrics from the story. If it values 'CI/CD', highlight those parts of the story.",
]

CONTENT_RULES = [
    "- **Modify the content** (text inside `\\resumeItem`, `\\resumeSubheading`, and skill sections) of the current LaTeX resume to match the job description.",
    "- **Ensure a highly technical tone** suitable for Software Engineer (SDE), DevOps, or SRE roles. Emphasize systems, automation, scalability, and performance.",
    "- Write concise, metric-driven bullet points using the XYZ formula (Accomplished X, measured by Y, by doing Z).",
    "- **Bold the most impactful parts** of each bullet, typically the measurable results (performance gains, uptime improvements, latency reductions, cost savings). Example: `Improved API throughput by \\textbf{40\\%} through caching optimization.`",
    "- **Keyword Optimization:** Naturally integrate keywords from the job description into the rewritten bullet points.",
]

INVISIBLE_KEYWORDS_RULE = (
    "- **Use `\\invisible{}` for ATS Optimization:** The LaTeX preamble defines a command `\\invisible{text}` "
    "which adds invisible text to the PDF. Use it to embed common variations of keywords for Applicant Tracking "
    "Systems. For example, if the visible text is `React`, you might write `React\\invisible{ React.js ReactJS}`; "
    "next to `AWS` you could add `\\invisible{ Amazon Web Services}`."
)

ETHICS_RULE = (
    "- **Ethical Skill Matching:** If the resume mentions a tool (e.g., 'Jenkins') and the job description requires "
    "a similar one (e.g., 'GitLab CI'), feature the required tool *only* if the existing experience supports it "
    "(e.g., \"automated CI/CD pipelines\"). Do not invent experience."
)

GUARDRAIL_RULES = [
    "- **STRICTLY preserve the LaTeX structure,** preamble, custom macros (\\resumeItem, \\resumeSubheading, etc.), sections, and formatting.",
    "- **Do NOT add new packages.** Do NOT remove existing commands/macros.",
    "- Keep the header (name, contacts) and hyperlinks intact.",
    "- **Maintain a 1-page limit.** Prefer rewording and replacing existing bullet points over adding new ones, as the template is tightly constrained.",
]

OUTPUT_RULES = [
    "- **Output ONLY the raw, complete .tex document** (from `\\documentclass...` to `\\end{document}`).",
    "- Do not add any explanations, comments, or markdown code fences (` ``` `).",
]


def build_prompt(
    base: str,
    job_description: str,
    experience_context: Optional[str] = None,
    invisible_keywords: bool = True,
) -> str:
    """
    Build the single prompt sent to the model.

    Instructions come first, then the job description, the optional
    experience narrative, and finally the LaTeX source to edit.

    Args:
        base: Current LaTeX resume
        job_description: Target job description
        experience_context: Narrative of past work used as source of truth
        invisible_keywords: Ask for ``\\invisible{}`` ATS keyword variants

    Returns:
        Prompt text, sections separated by blank lines
    """
    with_context = bool(experience_context and experience_context.strip())

    parts: List[str] = [TAILOR_INTRO_WITH_CONTEXT if with_context else TAILOR_INTRO]
    if with_context:
        parts.extend(CONTEXT_OVERVIEW)
    parts.append("## Core Instructions")
    if with_context:
        parts.extend(CONTEXT_RULES)
    parts.extend(CONTENT_RULES)
    if invisible_keywords:
        parts.append(INVISIBLE_KEYWORDS_RULE)
    parts.append(ETHICS_RULE)
    parts.extend(GUARDRAIL_RULES)
    parts.extend(OUTPUT_RULES)

    parts.extend(["---", "## Job Description (The Filter)", job_description])
    if with_context:
        parts.extend(["---", "## Experience Context (The Story / Source of Truth)", experience_context])
    parts.extend(["---", "## Current LaTeX resume (The Document to Edit)", base])
    return "\n\n".join(parts)
