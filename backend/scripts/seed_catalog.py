"""Seed script for the Agent Marketplace API.

Creates the default admin user and the launch catalog (standalone agents plus
the LexiSuite team and its member agents). Rows are matched by name, so the
script is idempotent and safe to run on every container start.
"""

import asyncio
import logging
from sqlalchemy import select

from app.database import AsyncSessionLocal
from app.models.user import User, UserRole
from app.models.agent import Agent
from app.models.agent_team import AgentTeam
from app.auth.security import hash_password
from app.config import settings

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Prices in cents
AGENTS = [
    {
        "name": "Email Assistant",
        "description": "Automate email management and responses.",
        "price": 999,
        "category": "Communication",
        "features": "Email classification, auto-replies, follow-up reminders",
        "icon_class": "bx-envelope",
        "icon_bg_class": "bg-blue-100",
        "gradient_class": "from-blue-500 to-blue-600",
        "is_popular": True,
    },
    {
        "name": "Social Media Manager",
        "description": "Automate content creation and scheduling across all your social media platforms.",
        "price": 1299,
        "category": "Marketing",
        "features": "Content creation, scheduling, analytics",
        "icon_class": "bx-bot",
        "icon_bg_class": "bg-blue-100",
        "gradient_class": "from-blue-500 to-purple-500",
        "is_popular": True,
    },
    {
        "name": "Data Analyzer",
        "description": "Process and analyze large datasets to extract valuable insights automatically.",
        "price": 1999,
        "category": "Data",
        "features": "Data processing, analysis, visualization",
        "icon_class": "bx-data",
        "icon_bg_class": "bg-green-100",
        "gradient_class": "from-green-500 to-teal-500",
        "is_new": True,
    },
    {
        "name": "Customer Support",
        "description": "AI-powered customer support that handles inquiries 24/7 with natural language.",
        "price": 2499,
        "category": "Support",
        "features": "Query handling, knowledge base integration, escalation",
        "icon_class": "bx-message-square-dots",
        "icon_bg_class": "bg-purple-100",
        "gradient_class": "from-purple-500 to-pink-500",
        "is_enterprise": True,
    },
    {
        "name": "LexiDraft AI",
        "description": "AI-powered contract generation & compliance review for lawyers and law firms.",
        "price": 2999,
        "category": "Legal",
        "features": "Contract generation, compliance review, legal document automation",
        "icon_class": "bx-file-blank",
        "icon_bg_class": "bg-amber-100",
        "gradient_class": "from-amber-500 to-orange-500",
        "is_new": True,
    },
    {
        "name": "HiredEdge",
        "description": "Auto-generates ATS-optimized resumes & applies to jobs with one click.",
        "price": 1499,
        "category": "Career",
        "features": "Resume optimization, job application automation, ATS keyword matching",
        "icon_class": "bx-file-find",
        "icon_bg_class": "bg-cyan-100",
        "gradient_class": "from-cyan-500 to-blue-500",
        "is_popular": True,
    },
    {
        "name": "PropMatch AI",
        "description": "AI-driven lead scoring, automated follow-ups, & real-time property matching.",
        "price": 3499,
        "category": "Real Estate",
        "features": "Lead generation, property matching, automated follow-ups",
        "icon_class": "bx-building-house",
        "icon_bg_class": "bg-green-100",
        "gradient_class": "from-green-500 to-emerald-500",
        "is_enterprise": True,
    },
    {
        "name": "ShopGenie",
        "description": "Auto-optimizes product titles, descriptions & pricing based on market trends.",
        "price": 1999,
        "category": "E-commerce",
        "features": "Product listing optimization, pricing strategy, description enhancement",
        "icon_class": "bx-store",
        "icon_bg_class": "bg-violet-100",
        "gradient_class": "from-violet-500 to-purple-500",
        "is_popular": True,
    },
]

LEXISUITE = {
    "name": "LexiSuite",
    "description": "AI-powered legal document generation, compliance review, and due diligence",
    "category": "Legal",
    "price": 9999,
    "target": "Law Firms, Compliance Teams, Enterprises with Contract Management Needs",
    "impact": "Saves 80% of time in contract drafting & legal research",
    "workflow": {
        "steps": [
            {"step": 1, "description": "User uploads or requests a contract", "agent": "ContractBot"},
            {"step": 2, "description": "ReviewBot checks for missing clauses & compliance", "agent": "ReviewBot"},
            {"step": 3, "description": "CaseLawBot pulls case references for relevant sections", "agent": "CaseLawBot"},
            {"step": 4, "description": "DueDiligenceBot flags risks involving any parties", "agent": "DueDiligenceBot"},
        ]
    },
    "icon_class": "bx-gavel",
    "gradient_class": "from-amber-500 to-red-500",
    "is_popular": True,
    "is_featured": True,
}

LEXISUITE_MEMBERS = [
    {
        "name": "ContractBot",
        "description": "AI-powered legal document generation (NDA, Lease, Partnership, etc.).",
        "price": 2999,
        "category": "Legal",
        "features": "Document templates, clause generation, customization options",
        "icon_class": "bx-file-blank",
        "icon_bg_class": "bg-amber-100",
        "gradient_class": "from-amber-500 to-red-500",
        "team_role": "Document Generation",
    },
    {
        "name": "ReviewBot",
        "description": "Compliance & risk analysis of uploaded contracts.",
        "price": 2499,
        "category": "Legal",
        "features": "Clause checking, compliance verification, risk detection",
        "icon_class": "bx-search",
        "icon_bg_class": "bg-amber-100",
        "gradient_class": "from-amber-600 to-red-600",
        "team_role": "Compliance Analysis",
    },
    {
        "name": "CaseLawBot",
        "description": "RAG-powered case law research assistant (fetches relevant legal precedents).",
        "price": 2999,
        "category": "Legal",
        "features": "Case law search, precedent analysis, legal research",
        "icon_class": "bx-book",
        "icon_bg_class": "bg-amber-100",
        "gradient_class": "from-amber-700 to-red-700",
        "team_role": "Legal Research",
    },
    {
        "name": "DueDiligenceBot",
        "description": "Background verification & risk assessment for business deals.",
        "price": 3499,
        "category": "Legal",
        "features": "Background checks, risk assessment, deal verification",
        "icon_class": "bx-shield",
        "icon_bg_class": "bg-amber-100",
        "gradient_class": "from-amber-800 to-red-800",
        "team_role": "Risk Assessment",
    },
]


async def seed_admin(session) -> User:
    """Create default admin user if it doesn't exist."""
    result = await session.execute(select(User).where(User.email == settings.ADMIN_EMAIL))
    admin_user = result.scalar_one_or_none()

    if admin_user:
        logger.info("Admin user already exists, skipping")
        return admin_user

    admin_user = User(
        name=settings.ADMIN_NAME,
        email=settings.ADMIN_EMAIL,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        user_role=UserRole.ADMIN.value,
        status="active"
    )
    session.add(admin_user)
    await session.flush()

    logger.info(f"Admin user created: {settings.ADMIN_EMAIL}")
    return admin_user


async def _agent_exists(session, name: str) -> bool:
    result = await session.execute(select(Agent.uuid).where(Agent.name == name))
    return result.first() is not None


async def seed_catalog(session, admin_user: User) -> int:
    """Create the launch agents and the LexiSuite team. Returns the number of rows added."""
    created = 0

    for fields in AGENTS:
        if await _agent_exists(session, fields["name"]):
            continue
        session.add(Agent(**fields, created_by=admin_user.uuid))
        created += 1

    result = await session.execute(select(AgentTeam).where(AgentTeam.name == LEXISUITE["name"]))
    team = result.scalar_one_or_none()
    if team is None:
        team = AgentTeam(**LEXISUITE, created_by=admin_user.uuid)
        session.add(team)
        await session.flush()
        created += 1

    for fields in LEXISUITE_MEMBERS:
        if await _agent_exists(session, fields["name"]):
            continue
        session.add(Agent(**fields, team_id=team.uuid, created_by=admin_user.uuid))
        created += 1

    return created


async def seed():
    async with AsyncSessionLocal() as session:
        admin_user = await seed_admin(session)
        created = await seed_catalog(session, admin_user)
        await session.commit()

    logger.info(f"Catalog seed complete: {created} rows added")


def main():
    """Entry point for the seed script."""
    asyncio.run(seed())


if __name__ == "__main__":
    main()
