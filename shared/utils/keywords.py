import re
from typing import List

from shared.schemas.resume import KeywordSummary

MIN_TEXT_LENGTH = 50

TECH_KEYWORDS = [
    r"javascript", r"typescript", r"python", r"java", r"c\+\+", r"c#", r"ruby", r"go", r"rust", r"php",
    r"react", r"vue", r"angular", r"node\.?js", r"express", r"django", r"flask", r"spring", r"laravel", r"next\.?js",
    r"aws", r"azure", r"gcp", r"docker", r"kubernetes", r"jenkins", r"ci/cd", r"terraform", r"ansible",
    r"sql", r"nosql", r"mongodb", r"postgresql", r"mysql", r"redis", r"elasticsearch", r"dynamodb",
    r"git", r"github", r"gitlab", r"jira", r"agile", r"scrum", r"devops", r"sre", r"mlops",
    r"rest", r"graphql", r"api", r"microservices", r"serverless", r"lambda",
    r"html", r"css", r"sass", r"tailwind", r"bootstrap", r"material[- ]ui",
    r"webpack", r"vite", r"babel", r"npm", r"yarn", r"pnpm", r"turbo",
    r"jest", r"mocha", r"cypress", r"selenium", r"testing", r"tdd", r"bdd",
    r"linux", r"unix", r"bash", r"shell", r"scripting", r"powershell",
    r"machine learning", r"ml", r"ai", r"deep learning", r"nlp", r"computer vision",
    r"data science", r"analytics", r"big data", r"spark", r"hadoop", r"kafka",
    r"blockchain", r"web3", r"solidity", r"smart contracts",
]

QUALIFICATION_KEYWORDS = [
    r"bachelor", r"master", r"phd", r"degree", r"certification", r"certified",
    r"\d+\+?\s*years?", r"experience", r"senior", r"junior", r"lead", r"principal", r"staff",
    r"b\.?s\.?", r"m\.?s\.?", r"b\.?tech", r"m\.?tech", r"mba",
]

SOFT_SKILL_KEYWORDS = [
    r"leadership", r"communication", r"teamwork", r"problem[- ]solving",
    r"analytical", r"critical thinking", r"collaboration", r"mentoring", r"coaching",
    r"remote", r"hybrid", r"on[- ]site", r"full[- ]time", r"part[- ]time", r"contract",
    r"startup", r"enterprise", r"fast[- ]paced", r"innovative",
]


def _first_matches(patterns: List[str], text: str) -> List[str]:
    # one normalized entry per pattern, first occurrence wins
    found: List[str] = []
    for pattern in patterns:
        match = re.search(rf"\b{pattern}\b", text, re.IGNORECASE)
        if match:
            value = match.group(0).lower()
            if value not in found:
                found.append(value)
    return found


def _all_matches(patterns: List[str], text: str) -> List[str]:
    found: List[str] = []
    for pattern in patterns:
        for match in re.finditer(rf"\b{pattern}\b", text, re.IGNORECASE):
            value = match.group(0)
            if value not in found:
                found.append(value)
    return found


def extract_keywords(text: str) -> KeywordSummary:
    """
    Scan a job description against fixed keyword lists.

    Returns at most 20 skills, 5 qualifications and 10 other keywords.
    Texts shorter than 50 characters are ignored.
    """
    if not text or len(text) < MIN_TEXT_LENGTH:
        return KeywordSummary()
    return KeywordSummary(
        skills=_first_matches(TECH_KEYWORDS, text)[:20],
        qualifications=_all_matches(QUALIFICATION_KEYWORDS, text)[:5],
        other=_first_matches(SOFT_SKILL_KEYWORDS, text)[:10],
    )
