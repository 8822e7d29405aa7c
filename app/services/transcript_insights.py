"""
Эвристики поверх транскрипта: разбивка на разделы интервью
и извлечение упоминаний технологий, компаний и имен.
"""
import re
from typing import Iterable, List, Tuple

from app.models.transcript import TranscriptSegment
from app.models.transcription import TimelineEntry, TranscriptEntities

SUMMARY_CHARS = 100

# Порядок важен: срабатывает первое совпадение
SECTION_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("introduction", ("introduce", "background", "tell me about yourself", "experience")),
    ("problem_discussion", ("problem", "challenge", "difficult", "issue")),
    ("solution_discussion", ("solution", "approach", "solve", "implement")),
    ("technical_design", ("design", "architecture", "system", "build")),
    ("questions", ("question", "ask", "clarification")),
]

TECH_TERMS = [
    "javascript", "python", "java", "react", "angular", "vue", "node", "express",
    "mongodb", "postgresql", "mysql", "redis", "aws", "azure", "gcp", "docker",
    "kubernetes", "git", "github", "gitlab", "jenkins", "ci/cd", "api", "rest",
    "graphql", "microservices", "html", "css", "typescript", "sass", "webpack",
    "babel", "npm", "yarn", "sql", "nosql", "linux", "unix", "windows", "mac",
    "agile", "scrum", "kanban", "devops", "machine learning", "ai", "tensorflow",
    "pytorch", "spring", "django", "flask", "laravel", "rails", "php", "cplusplus",
    "csharp", "dotnet", "go", "rust", "swift", "kotlin", "flutter", "xamarin",
]

COMPILED_TECH_TERMS = [
    (term, re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)) for term in TECH_TERMS
]

# Термины, которые \b не ловит из-за спецсимволов
SPECIAL_TECH_PATTERNS = [
    ("C++", re.compile(r"\bc\+\+", re.IGNORECASE)),
    ("C#", re.compile(r"\bc#", re.IGNORECASE)),
    (".NET", re.compile(r"\.net\b", re.IGNORECASE)),
]

COMPANY_PATTERNS = [
    re.compile(r"\b(Google|Microsoft|Amazon|Apple|Facebook|Meta|Netflix|Tesla|Uber|Airbnb)\b", re.IGNORECASE),
    re.compile(r"\b(IBM|Oracle|Salesforce|Adobe|Intel|NVIDIA|AMD|Cisco|VMware)\b", re.IGNORECASE),
    re.compile(r"\b(Spotify|Twitter|LinkedIn|GitHub|Slack|Zoom|Dropbox|PayPal|Square)\b", re.IGNORECASE),
    re.compile(r"\b([A-Z][a-z]+ (?:Inc|Corp|LLC|Ltd|Company|Systems|Technologies|Solutions))\b"),
]

NAME_PATTERN = re.compile(r"\b[A-Z][a-z]+ [A-Z][a-z]+\b")


def format_timestamp(seconds: float) -> str:
    """Секунды -> MM:SS"""
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


def detect_section_type(text: str) -> str:
    lower_text = text.lower()
    for section, keywords in SECTION_KEYWORDS:
        if any(keyword in lower_text for keyword in keywords):
            return section
    return "discussion"


def _summarize(content: str) -> str:
    return content[:SUMMARY_CHARS] + ("..." if len(content) > SUMMARY_CHARS else "")


def build_timeline(segments: Iterable[TranscriptSegment]) -> List[TimelineEntry]:
    """
    Склеивает подряд идущие сегменты одного типа в разделы интервью.
    Конец раздела - начало следующего; у последнего раздела конца нет.
    """
    timeline: List[TimelineEntry] = []
    current_section = None

    for segment in segments:
        text = segment.text.strip()
        section = detect_section_type(text)

        if section != current_section:
            if timeline:
                timeline[-1].end = format_timestamp(segment.start)
            timeline.append(TimelineEntry(
                start=format_timestamp(segment.start),
                section=section,
                content=text,
                summary=_summarize(text),
            ))
            current_section = section
        else:
            last = timeline[-1]
            last.content = f"{last.content} {text}".strip()
            last.summary = _summarize(last.content)

    return timeline


def _unique(items: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(items))


def extract_entities(text: str) -> TranscriptEntities:
    if not text:
        return TranscriptEntities()

    technologies = [
        term[0].upper() + term[1:]
        for term, pattern in COMPILED_TECH_TERMS
        if pattern.search(text)
    ]
    technologies += [name for name, pattern in SPECIAL_TECH_PATTERNS if pattern.search(text)]

    companies: List[str] = []
    for pattern in COMPANY_PATTERNS:
        companies += [match.group(0).strip() for match in pattern.finditer(text)]

    names = [
        name for name in NAME_PATTERN.findall(text)
        if name not in technologies and name not in companies
    ]

    return TranscriptEntities(
        names=_unique(names)[:10],
        companies=_unique(companies)[:10],
        technologies=_unique(technologies)[:15],
        locations=[],
    )
