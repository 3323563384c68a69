"""Difficulty and topic policy per experience level.

Pure lookup table: every experience level maps to a LevelConfig holding its
numeric difficulty band, allowed difficulty labels, maximum concept depth and
role-keyed allowed/forbidden topic lists. Roles that are not listed fall back
to the `_default` bucket.
"""

from dataclasses import dataclass
from typing import Dict, List

from interview_engine.domain.models.session import (
    DIFFICULTY_ORDER,
    Difficulty,
    ExperienceLevel,
)

DEFAULT_ROLE = "_default"


@dataclass(frozen=True)
class DifficultyBand:
    """Inclusive range on the 1-10 level-score scale."""

    min: float
    max: float

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class LevelConfig:
    """Policy bundle for one experience level."""

    allowed_difficulty: List[Difficulty]
    difficulty_band: DifficultyBand
    max_concept_depth: int
    allowed_topics: Dict[str, List[str]]
    forbidden_topics: Dict[str, List[str]]


# =============================================================================
# Topic buckets per role
# =============================================================================

FRONTEND_TOPICS = {
    "junior": [
        "HTML basics", "CSS fundamentals", "CSS box model", "CSS flexbox",
        "JavaScript basics", "Variables and data types", "Functions and scope",
        "DOM manipulation", "Event handling", "Arrays and loops",
        "Simple React components", "JSX syntax", "React useState", "React useEffect",
        "Basic form handling", "Conditional rendering", "Lists and keys",
        "Basic responsive design", "CSS media queries", "Git basics",
    ],
    "mid": [
        "React hooks (advanced)", "Custom hooks", "Context API", "State management basics",
        "React Router", "Component patterns", "Error boundaries", "React lifecycle",
        "CSS Grid", "CSS animations", "Sass/SCSS", "CSS modules",
        "REST API integration", "Async/await", "Promises", "Error handling",
        "TypeScript basics", "Unit testing basics", "Webpack basics",
        "Accessibility fundamentals", "Performance basics", "Code splitting",
        "Design patterns (basic)", "Authentication flows", "Form validation libraries",
    ],
    "senior": [
        "System design", "Scalability", "Performance optimization",
        "SSR vs CSR tradeoffs", "Next.js architecture", "Microfrontends",
        "State architecture patterns", "Redux internals", "Rendering optimization",
        "Virtual DOM internals", "Reconciliation algorithm", "Fiber architecture",
        "Build tool optimization", "Bundle analysis", "Tree shaking internals",
        "Design system architecture", "Monorepo strategies", "CI/CD for frontend",
        "Web security (XSS, CSRF)", "Service workers", "Progressive web apps",
        "WebSocket architecture", "GraphQL architecture", "Testing strategy",
        "Technical leadership", "Code review practices", "Team mentoring",
    ],
}

BACKEND_TOPICS = {
    "junior": [
        "HTTP basics", "REST API fundamentals", "HTTP methods", "Status codes",
        "Express.js basics", "Routing", "Middleware basics", "Request/Response cycle",
        "JSON handling", "CRUD operations", "Basic database queries",
        "MongoDB basics", "SQL basics", "Environment variables",
        "Error handling basics", "Async/await basics", "Node.js fundamentals",
        "npm basics", "File system operations", "Basic authentication",
    ],
    "mid": [
        "Database design", "Indexing strategies", "Query optimization",
        "Authentication (JWT, OAuth)", "Authorization patterns", "Session management",
        "Middleware patterns", "Input validation", "Error handling patterns",
        "API versioning", "Pagination", "Rate limiting",
        "Caching basics (Redis)", "Message queues basics", "Docker basics",
        "Unit testing", "Integration testing", "TypeScript",
        "ORM usage (Mongoose, Prisma)", "Logging and monitoring",
        "Design patterns", "SOLID principles", "Clean architecture basics",
    ],
    "senior": [
        "System design", "Microservices architecture", "Event-driven architecture",
        "Database scaling", "Sharding strategies", "Replication",
        "Distributed systems", "CAP theorem", "Consistency patterns",
        "High availability", "Load balancing", "Service mesh",
        "CQRS pattern", "Event sourcing", "Domain-driven design",
        "API gateway patterns", "gRPC", "Message broker architecture",
        "Kubernetes orchestration", "Cloud architecture (AWS/GCP)",
        "Security architecture", "Zero trust", "DevSecOps",
        "Performance profiling", "Observability", "SRE practices",
        "Technical leadership", "Architecture decision records",
    ],
}

FULLSTACK_TOPICS = {
    "junior": FRONTEND_TOPICS["junior"][:12] + BACKEND_TOPICS["junior"][:12],
    "mid": FRONTEND_TOPICS["mid"][:14] + BACKEND_TOPICS["mid"][:14],
    "senior": FRONTEND_TOPICS["senior"][:14] + BACKEND_TOPICS["senior"][:14],
}

GENERIC_TOPICS = {
    "junior": [
        "Programming basics", "Data types", "Functions", "Loops and conditionals",
        "Basic algorithms", "Simple data structures", "Version control basics",
        "Debugging basics", "Code readability", "Basic testing",
    ],
    "mid": [
        "Design patterns", "SOLID principles", "Testing strategies",
        "Code architecture", "Performance basics", "API design",
        "Database design", "Security basics", "CI/CD basics",
    ],
    "senior": [
        "System design", "Architecture patterns", "Scalability",
        "Leadership", "Technical strategy", "Performance optimization",
        "Security architecture", "Cloud architecture", "Team management",
    ],
}

# Cross-level leakage: topics a lower level must never be asked about
FORBIDDEN_TOPICS = {
    "Frontend Developer": {
        "junior": [
            "system design", "microservices", "microfrontends", "SSR vs CSR tradeoffs",
            "rendering optimization", "virtual DOM internals", "fiber architecture",
            "scalability", "architecture patterns", "performance profiling",
            "build tool optimization", "monorepo strategies", "design system architecture",
        ],
        "mid": [
            "fiber architecture", "reconciliation algorithm", "microfrontends",
            "monorepo strategies", "technical leadership",
        ],
        "senior": [],
    },
    "Backend Developer": {
        "junior": [
            "system design", "microservices", "distributed systems", "CQRS",
            "event sourcing", "domain-driven design", "sharding", "replication",
            "service mesh", "kubernetes", "cloud architecture",
            "scalability", "high availability", "load balancing",
        ],
        "mid": [
            "service mesh", "CQRS", "event sourcing", "domain-driven design",
            "kubernetes orchestration", "zero trust",
        ],
        "senior": [],
    },
    "Fullstack Developer": {
        "junior": [
            "system design", "microservices", "microfrontends", "distributed systems",
            "scalability", "architecture patterns", "performance profiling",
            "sharding", "replication", "event sourcing", "CQRS",
        ],
        "mid": [
            "microfrontends", "fiber architecture", "service mesh",
            "CQRS", "event sourcing", "domain-driven design",
        ],
        "senior": [],
    },
}

_DEFAULT_FORBIDDEN = {
    "junior": ["system design", "scalability", "architecture patterns", "distributed systems"],
    "mid": ["fiber architecture", "CQRS", "event sourcing"],
    "senior": [],
}


def _topics_for(bucket: str) -> Dict[str, List[str]]:
    return {
        "Frontend Developer": FRONTEND_TOPICS[bucket],
        "Backend Developer": BACKEND_TOPICS[bucket],
        "Fullstack Developer": FULLSTACK_TOPICS[bucket],
        DEFAULT_ROLE: GENERIC_TOPICS[bucket],
    }


def _forbidden_for(bucket: str) -> Dict[str, List[str]]:
    forbidden = {role: levels[bucket] for role, levels in FORBIDDEN_TOPICS.items()}
    forbidden[DEFAULT_ROLE] = _DEFAULT_FORBIDDEN[bucket]
    return forbidden


# =============================================================================
# Difficulty matrix
# =============================================================================

DIFFICULTY_MATRIX: Dict[ExperienceLevel, LevelConfig] = {
    ExperienceLevel.JUNIOR: LevelConfig(
        allowed_difficulty=[Difficulty.EASY],
        difficulty_band=DifficultyBand(min=1, max=3),
        max_concept_depth=3,
        allowed_topics=_topics_for("junior"),
        forbidden_topics=_forbidden_for("junior"),
    ),
    ExperienceLevel.MID: LevelConfig(
        allowed_difficulty=[Difficulty.EASY, Difficulty.MEDIUM],
        difficulty_band=DifficultyBand(min=3, max=7),
        max_concept_depth=6,
        allowed_topics=_topics_for("mid"),
        forbidden_topics=_forbidden_for("mid"),
    ),
    ExperienceLevel.SENIOR: LevelConfig(
        allowed_difficulty=[Difficulty.MEDIUM, Difficulty.HARD],
        difficulty_band=DifficultyBand(min=6, max=10),
        max_concept_depth=10,
        allowed_topics=_topics_for("senior"),
        forbidden_topics=_forbidden_for("senior"),
    ),
}


def get_level_config(level: ExperienceLevel) -> LevelConfig:
    """Return the policy bundle for an experience level."""
    return DIFFICULTY_MATRIX[ExperienceLevel(level)]


def get_allowed_topics(role: str, level: ExperienceLevel) -> List[str]:
    """Allowed topics for a role at a level, `_default` for unknown roles."""
    topics = get_level_config(level).allowed_topics
    return topics.get(role) or topics[DEFAULT_ROLE]


def get_forbidden_topics(role: str, level: ExperienceLevel) -> List[str]:
    """Forbidden topics for a role at a level, `_default` for unknown roles."""
    topics = get_level_config(level).forbidden_topics
    if role in topics:
        return topics[role]
    return topics[DEFAULT_ROLE]


def get_difficulty_band(level: ExperienceLevel) -> DifficultyBand:
    return get_level_config(level).difficulty_band


def is_difficulty_allowed(difficulty: Difficulty, level: ExperienceLevel) -> bool:
    return Difficulty(difficulty) in get_level_config(level).allowed_difficulty


def clamp_difficulty(difficulty: Difficulty, level: ExperienceLevel) -> Difficulty:
    """Map a difficulty to the nearest label allowed for the level.

    Never raises and always returns a member of the allowed set, so applying
    it twice gives the same result as applying it once.
    """
    allowed = get_level_config(level).allowed_difficulty
    difficulty = Difficulty(difficulty)
    if difficulty in allowed:
        return difficulty

    index = DIFFICULTY_ORDER.index(difficulty)
    allowed_indices = [DIFFICULTY_ORDER.index(d) for d in allowed]
    lowest, highest = min(allowed_indices), max(allowed_indices)

    if index < lowest:
        return DIFFICULTY_ORDER[lowest]
    if index > highest:
        return DIFFICULTY_ORDER[highest]
    # Gap inside the allowed range: pick the closest allowed rung, lower first
    return min(
        allowed,
        key=lambda d: (abs(DIFFICULTY_ORDER.index(d) - index), DIFFICULTY_ORDER.index(d)),
    )
