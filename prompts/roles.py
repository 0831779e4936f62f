"""Role-to-domain table constraining what each interview may cover."""
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field


class RoleDomain(BaseModel):
    """Topic scope for a role. ``curated`` is False for the generic fallback."""

    domain: str
    scope: str
    forbidden: str
    examples: List[str] = Field(default_factory=list)
    curated: bool = True


ROLE_DOMAINS: Dict[str, RoleDomain] = {
    "Frontend Developer": RoleDomain(
        domain="frontend web development",
        scope=(
            "HTML, CSS, JavaScript, React, Angular, Vue, state management, component architecture, "
            "browser rendering, responsive design, accessibility, and frontend performance optimization"
        ),
        forbidden="Do NOT ask about backend architecture, database schema design, server-side scaling, DevOps, or Salesforce.",
        examples=[
            "How does the virtual DOM work in React?",
            "What is the difference between CSS Grid and Flexbox?",
            "Explain how React hooks manage component state.",
        ],
    ),
    "Backend Developer": RoleDomain(
        domain="backend development and server-side engineering",
        scope=(
            "Node.js, Express, REST APIs, authentication (JWT, OAuth), SQL and NoSQL databases, caching, "
            "microservices, system design, error handling, logging, server security, and backend performance"
        ),
        forbidden="Do NOT ask about CSS styling, UI/UX design, frontend frameworks, or Salesforce.",
        examples=[
            "What is the difference between SQL and NoSQL databases?",
            "How does JWT authentication work?",
            "Explain the concept of middleware in a web framework.",
        ],
    ),
    "Full Stack Developer": RoleDomain(
        domain="full-stack web development spanning frontend and backend",
        scope=(
            "frontend-backend integration, REST/GraphQL APIs, database-UI workflows, end-to-end authentication, "
            "deployment, CI/CD, cross-layer performance, state management, real-time communication, "
            "and moderate system design"
        ),
        forbidden=(
            "Do NOT ask isolated frontend-only or backend-only trivia. Questions must test cross-layer "
            "understanding. Do NOT ask about Salesforce."
        ),
        examples=[
            "How would you design the authentication flow from login form to protected API endpoint?",
            "Explain how you would connect a React frontend to a REST API with proper error handling.",
            "What strategies would you use to optimize performance across both client and server?",
        ],
    ),
    "Salesforce Developer": RoleDomain(
        domain="Salesforce platform development",
        scope=(
            "Apex programming, SOQL, SOSL, triggers, Lightning Web Components (LWC), Salesforce architecture, "
            "governor limits, Flows, Process Builder, REST/SOAP integration on Salesforce, security and sharing "
            "rules, data model, batch Apex, and Visualforce"
        ),
        forbidden="Do NOT ask about generic React, Node.js, Python, or non-Salesforce system design.",
        examples=[
            "What are governor limits in Salesforce and why do they matter?",
            "Explain the difference between before and after triggers in Apex.",
            "How does the Lightning Web Components event model work?",
        ],
    ),
    "Software Engineer": RoleDomain(
        domain="core software engineering and computer science fundamentals",
        scope=(
            "data structures, algorithms, object-oriented design, system design, concurrency, design patterns, "
            "code quality, refactoring, version control, testing strategies, complexity analysis, "
            "and distributed systems basics"
        ),
        forbidden=(
            "Do NOT ask about specific frameworks (React, Angular), UI design, or Salesforce. "
            "Focus on language-agnostic engineering principles."
        ),
        examples=[
            "What is the time complexity of binary search?",
            "Explain the SOLID principles in object-oriented design.",
            "How would you design a URL shortening service?",
        ],
    ),
    "Data Scientist": RoleDomain(
        domain="data science, machine learning, and statistical analysis",
        scope=(
            "Python for data science, machine learning algorithms, statistics, deep learning, data analysis, "
            "SQL for analytics, TensorFlow, PyTorch, data visualization, feature engineering, model evaluation, "
            "big data concepts, and NLP"
        ),
        forbidden="Do NOT ask about frontend development, CSS, backend APIs, or Salesforce.",
        examples=[
            "What is the difference between supervised and unsupervised learning?",
            "Explain the bias-variance tradeoff.",
            "How would you handle missing values in a dataset?",
        ],
    ),
    "Product Manager": RoleDomain(
        domain="product management and strategy",
        scope=(
            "product strategy, roadmap planning, user research, market analysis, agile methodologies, "
            "stakeholder management, metrics/KPIs, go-to-market strategy, competitive analysis, product "
            "lifecycle, prioritization frameworks, and experimentation"
        ),
        forbidden="Do NOT ask about coding, technical implementation details, or specific programming languages.",
        examples=[
            "How would you prioritize features for a new product launch?",
            "What metrics would you track to measure product success?",
            "Describe how you would conduct user research for a B2B product.",
        ],
    ),
    "Designer": RoleDomain(
        domain="UI/UX design and user experience",
        scope=(
            "UI/UX principles, Figma, design tools, user research methods, wireframing, prototyping, design "
            "systems, accessibility standards, visual hierarchy, typography, interaction design, responsive "
            "layouts, design thinking, usability testing, and motion design"
        ),
        forbidden="Do NOT ask about backend architecture, database design, algorithms, or Salesforce.",
        examples=[
            "What is the difference between UX and UI design?",
            "How would you approach designing a mobile-first experience?",
            "Explain the principles of visual hierarchy.",
        ],
    ),
}


def role_domain(role: str) -> RoleDomain:
    """Return the curated domain for ``role`` or a generic one built from its name.

    The generic domain carries no forbidden-topic list, only a reminder to stay
    on the role.
    """

    known = ROLE_DOMAINS.get(role)
    if known is not None:
        return known
    return RoleDomain(
        domain=role.lower(),
        scope=f"topics relevant to the {role} position",
        forbidden="Stay within the scope of the role.",
        examples=["Ask a relevant, focused question for this role."],
        curated=False,
    )


__all__ = ["ROLE_DOMAINS", "RoleDomain", "role_domain"]
