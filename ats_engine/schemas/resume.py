from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

SectionName = Literal["summary", "skills", "experience", "education", "projects"]
SECTION_NAMES: tuple[str, ...] = ("summary", "skills", "experience", "education", "projects")


class ContactInfo(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    linkedin: str | None = None
    github: str | None = None
    website: str | None = None


class ExperienceEntry(BaseModel):
    title: str = ""
    company: str = ""
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    description: str = ""
    bullets: list[str] = Field(default_factory=list)

    def text(self) -> str:
        header = " ".join(part for part in (self.title, self.company) if part)
        lines = [header] if header else []
        if self.description:
            lines.append(self.description)
        lines.extend(self.bullets)
        return "\n".join(lines)


class EducationEntry(BaseModel):
    degree: str = ""
    field_of_study: str | None = None
    institution: str = ""
    start_date: str | None = None
    end_date: str | None = None
    in_progress: bool = False
    details: list[str] = Field(default_factory=list)

    def text(self) -> str:
        head = ", ".join(part for part in (self.degree, self.field_of_study, self.institution) if part)
        return "\n".join([head, *self.details]) if head else "\n".join(self.details)


class ProjectEntry(BaseModel):
    name: str = ""
    description: str = ""
    technologies: list[str] = Field(default_factory=list)
    bullets: list[str] = Field(default_factory=list)

    def text(self) -> str:
        lines = [self.name] if self.name else []
        if self.description:
            lines.append(self.description)
        if self.technologies:
            lines.append(", ".join(self.technologies))
        lines.extend(self.bullets)
        return "\n".join(lines)


class StructuredResume(BaseModel):
    """Resume as produced by the upstream parsing collaborator."""

    contact: ContactInfo = Field(default_factory=ContactInfo)
    summary: str = ""
    objective: str = ""
    skills: list[str] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    projects: list[ProjectEntry] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    raw_text: str = ""

    def section_text(self, section: str) -> str:
        if section == "summary":
            return "\n".join(part for part in (self.summary, self.objective) if part)
        if section == "skills":
            return ", ".join(self.skills)
        if section == "experience":
            return "\n\n".join(entry.text() for entry in self.experience)
        if section == "education":
            return "\n\n".join(entry.text() for entry in self.education)
        if section == "projects":
            return "\n\n".join(entry.text() for entry in self.projects)
        if section == "certifications":
            return "\n".join(self.certifications)
        return ""

    def has_section(self, section: str) -> bool:
        return bool(self.section_text(section).strip())

    def full_text(self) -> str:
        if self.raw_text.strip():
            return self.raw_text
        chunks = [self.section_text(name) for name in (*SECTION_NAMES, "certifications")]
        return "\n\n".join(chunk for chunk in chunks if chunk.strip())

    def all_bullets(self) -> list[str]:
        bullets: list[str] = []
        for entry in self.experience:
            bullets.extend(entry.bullets)
        for project in self.projects:
            bullets.extend(project.bullets)
        return [bullet for bullet in bullets if bullet.strip()]

    @property
    def role_count(self) -> int:
        return len(self.experience)

    @property
    def has_active_education(self) -> bool:
        return any(entry.in_progress for entry in self.education)
