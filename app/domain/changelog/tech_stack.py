import json

from app.core.logging import get_logger
from app.domain.changelog.schemas import RepositoryFile, TechStack
from app.infra.github.client import GitHubClient

logger = get_logger(__name__)

# package.json dependency -> (bucket, display name)
PACKAGE_JSON_MAPPING: dict[str, tuple[str, str]] = {
    "next": ("frameworks", "Next.js"),
    "react": ("frameworks", "React"),
    "vue": ("frameworks", "Vue"),
    "express": ("frameworks", "Express"),
    "tailwindcss": ("frameworks", "Tailwind CSS"),
    "typescript": ("languages", "TypeScript"),
    "prisma": ("tools", "Prisma"),
}

# marker file -> language
MARKER_FILES: dict[str, str] = {
    "Cargo.toml": "Rust",
    "go.mod": "Go",
    "requirements.txt": "Python",
    "setup.py": "Python",
    "pyproject.toml": "Python",
    "Gemfile": "Ruby",
}


def _parse_package_json(content: str, tech_stack: TechStack) -> None:
    """Add technologies found in package.json dependencies"""
    try:
        package_json = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning("package.json parse failed error=%s", e)
        return

    if not isinstance(package_json, dict):
        logger.warning("package.json is not an object")
        return

    deps: dict = {}
    for field in ("dependencies", "devDependencies"):
        section = package_json.get(field)
        if section is None:
            continue
        if not isinstance(section, dict):
            logger.warning(
                "package.json field is not an object field=%s type=%s",
                field,
                type(section).__name__,
            )
            continue
        deps.update(section)

    for dep, (bucket, name) in PACKAGE_JSON_MAPPING.items():
        if dep in deps:
            getattr(tech_stack, bucket).add(name)

    tech_stack.languages.add("JavaScript")


async def detect_tech_stack(
    github: GitHubClient,
    owner: str,
    repo: str,
    structure: list[RepositoryFile],
) -> TechStack:
    """Detect languages, frameworks and tools from top-level manifests

    Args:
        github: GitHub client used to read package.json
        owner: repository owner
        repo: repository name
        structure: top-level repository listing

    Returns:
        detected tech stack, possibly empty
    """
    tech_stack = TechStack()
    names = {entry.name for entry in structure}

    if "package.json" in names:
        content = await github.fetch_file_content(owner, repo, "package.json")
        if content:
            _parse_package_json(content, tech_stack)

    for marker, language in MARKER_FILES.items():
        if marker in names:
            tech_stack.languages.add(language)

    logger.info(
        "tech stack detected repo=%s/%s languages=%d frameworks=%d tools=%d",
        owner,
        repo,
        len(tech_stack.languages),
        len(tech_stack.frameworks),
        len(tech_stack.tools),
    )
    return tech_stack
