"""
Canonical job-group registry for role fit.

JOB_GROUPS lists every (group, job) pair in display order; JOB_INDEX maps
job_id -> entry. GROUP_ROLE_TEMPLATES holds the role-aligned narrative for
each group id.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import NamedTuple


class JobEntry(NamedTuple):
    group_id: int
    group_name: str
    job_id: str
    job_name: str


JOB_GROUPS: tuple[JobEntry, ...] = (
    JobEntry(1, "Strategy·Analysis·Policy", "strategy_analyst", "Strategy Analyst"),
    JobEntry(1, "Strategy·Analysis·Policy", "management_analyst", "Management Analyst"),
    JobEntry(1, "Strategy·Analysis·Policy", "policy_analyst", "Policy Analyst"),
    JobEntry(1, "Strategy·Analysis·Policy", "economic_researcher", "Economic Researcher"),
    JobEntry(1, "Strategy·Analysis·Policy", "financial_analyst", "Financial Analyst"),
    JobEntry(1, "Strategy·Analysis·Policy", "risk_analyst", "Risk Analyst"),
    JobEntry(1, "Strategy·Analysis·Policy", "compliance_officer", "Compliance Officer"),
    JobEntry(1, "Strategy·Analysis·Policy", "internal_auditor", "Internal Auditor"),

    JobEntry(2, "Data·AI·Intelligence", "data_analyst", "Data Analyst"),
    JobEntry(2, "Data·AI·Intelligence", "data_scientist", "Data Scientist"),
    JobEntry(2, "Data·AI·Intelligence", "business_intelligence_analyst", "Business Intelligence Analyst"),
    JobEntry(2, "Data·AI·Intelligence", "machine_learning_analyst", "Machine Learning Analyst"),
    JobEntry(2, "Data·AI·Intelligence", "statistician", "Statistician"),
    JobEntry(2, "Data·AI·Intelligence", "operations_research_analyst", "Operations Research Analyst"),
    JobEntry(2, "Data·AI·Intelligence", "information_security_analyst", "Information Security Analyst"),

    JobEntry(3, "Engineering·Technology·Architecture", "software_engineer", "Software Engineer"),
    JobEntry(3, "Engineering·Technology·Architecture", "systems_architect", "Systems Architect"),
    JobEntry(3, "Engineering·Technology·Architecture", "cloud_engineer", "Cloud Engineer"),
    JobEntry(3, "Engineering·Technology·Architecture", "devops_engineer", "DevOps Engineer"),
    JobEntry(3, "Engineering·Technology·Architecture", "network_architect", "Network Architect"),
    JobEntry(3, "Engineering·Technology·Architecture", "qa_engineer", "QA Engineer"),
    JobEntry(3, "Engineering·Technology·Architecture", "safety_systems_engineer", "Safety Systems Engineer"),

    JobEntry(4, "Product·Service·Innovation", "product_manager", "Product Manager"),
    JobEntry(4, "Product·Service·Innovation", "service_designer", "Service Designer"),
    JobEntry(4, "Product·Service·Innovation", "ux_planner", "UX Planner"),
    JobEntry(4, "Product·Service·Innovation", "business_developer", "Business Developer"),
    JobEntry(4, "Product·Service·Innovation", "innovation_manager", "Innovation Manager"),
    JobEntry(4, "Product·Service·Innovation", "r_and_d_planner", "R&D Planner"),
    JobEntry(4, "Product·Service·Innovation", "new_venture_strategist", "New Venture Strategist"),

    JobEntry(5, "Education·Research·Training", "teacher", "Teacher"),
    JobEntry(5, "Education·Research·Training", "professor", "Professor"),
    JobEntry(5, "Education·Research·Training", "instructional_designer", "Instructional Designer"),
    JobEntry(5, "Education·Research·Training", "education_consultant", "Education Consultant"),
    JobEntry(5, "Education·Research·Training", "research_scientist", "Research Scientist"),
    JobEntry(5, "Education·Research·Training", "research_coordinator", "Research Coordinator"),
    JobEntry(5, "Education·Research·Training", "academic_advisor", "Academic Advisor"),

    JobEntry(6, "Psychology·Counseling·Social Care", "counselor", "Counselor"),
    JobEntry(6, "Psychology·Counseling·Social Care", "clinical_psychologist", "Clinical Psychologist"),
    JobEntry(6, "Psychology·Counseling·Social Care", "school_psychologist", "School Psychologist"),
    JobEntry(6, "Psychology·Counseling·Social Care", "social_worker", "Social Worker"),
    JobEntry(6, "Psychology·Counseling·Social Care", "behavioral_therapist", "Behavioral Therapist"),
    JobEntry(6, "Psychology·Counseling·Social Care", "rehabilitation_specialist", "Rehabilitation Specialist"),

    JobEntry(7, "Leadership·Executive·Public Governance", "ceo_coo_cso", "CEO / COO / CSO"),
    JobEntry(7, "Leadership·Executive·Public Governance", "public_policy_director", "Public Policy Director"),
    JobEntry(7, "Leadership·Executive·Public Governance", "government_administrator", "Government Administrator"),
    JobEntry(7, "Leadership·Executive·Public Governance", "program_director", "Program Director"),
    JobEntry(7, "Leadership·Executive·Public Governance", "public_strategy_lead", "Public Strategy Lead"),

    JobEntry(8, "Marketing·Sales·Communication", "marketing_strategist", "Marketing Strategist"),
    JobEntry(8, "Marketing·Sales·Communication", "brand_manager", "Brand Manager"),
    JobEntry(8, "Marketing·Sales·Communication", "sales_director", "Sales Director"),
    JobEntry(8, "Marketing·Sales·Communication", "pr_manager", "PR Manager"),
    JobEntry(8, "Marketing·Sales·Communication", "communication_manager", "Communication Manager"),
    JobEntry(8, "Marketing·Sales·Communication", "media_planner", "Media Planner"),
    JobEntry(8, "Marketing·Sales·Communication", "digital_marketer", "Digital Marketer"),

    JobEntry(9, "Design·Content·Media", "ux_ui_designer", "UX/UI Designer"),
    JobEntry(9, "Design·Content·Media", "graphic_designer", "Graphic Designer"),
    JobEntry(9, "Design·Content·Media", "video_producer", "Video Producer"),
    JobEntry(9, "Design·Content·Media", "content_strategist", "Content Strategist"),
    JobEntry(9, "Design·Content·Media", "creative_director", "Creative Director"),
    JobEntry(9, "Design·Content·Media", "editor", "Editor"),
    JobEntry(9, "Design·Content·Media", "multimedia_artist", "Multimedia Artist"),

    JobEntry(10, "Healthcare·Life Science", "physician", "Physician"),
    JobEntry(10, "Healthcare·Life Science", "nurse", "Nurse"),
    JobEntry(10, "Healthcare·Life Science", "medical_researcher", "Medical Researcher"),
    JobEntry(10, "Healthcare·Life Science", "clinical_data_manager", "Clinical Data Manager"),
    JobEntry(10, "Healthcare·Life Science", "biomedical_scientist", "Biomedical Scientist"),
    JobEntry(10, "Healthcare·Life Science", "public_health_analyst", "Public Health Analyst"),

    JobEntry(11, "Law·Compliance·Ethics", "lawyer", "Lawyer"),
    JobEntry(11, "Law·Compliance·Ethics", "legal_researcher", "Legal Researcher"),
    JobEntry(11, "Law·Compliance·Ethics", "compliance_manager", "Compliance Manager"),
    JobEntry(11, "Law·Compliance·Ethics", "ethics_officer", "Ethics Officer"),
    JobEntry(11, "Law·Compliance·Ethics", "regulatory_affairs_specialist", "Regulatory Affairs Specialist"),
    JobEntry(11, "Law·Compliance·Ethics", "contract_specialist", "Contract Specialist"),

    JobEntry(12, "Operations·Quality·Safety·Logistics", "operations_manager", "Operations Manager"),
    JobEntry(12, "Operations·Quality·Safety·Logistics", "quality_manager", "Quality Manager"),
    JobEntry(12, "Operations·Quality·Safety·Logistics", "safety_engineer", "Safety Engineer"),
    JobEntry(12, "Operations·Quality·Safety·Logistics", "process_analyst", "Process Analyst"),
    JobEntry(12, "Operations·Quality·Safety·Logistics", "supply_chain_analyst", "Supply Chain Analyst"),
    JobEntry(12, "Operations·Quality·Safety·Logistics", "logistics_planner", "Logistics Planner"),

    JobEntry(13, "Finance·Investment·Insurance", "investment_analyst", "Investment Analyst"),
    JobEntry(13, "Finance·Investment·Insurance", "portfolio_manager", "Portfolio Manager"),
    JobEntry(13, "Finance·Investment·Insurance", "credit_analyst", "Credit Analyst"),
    JobEntry(13, "Finance·Investment·Insurance", "actuary", "Actuary"),
    JobEntry(13, "Finance·Investment·Insurance", "insurance_underwriter", "Insurance Underwriter"),
    JobEntry(13, "Finance·Investment·Insurance", "treasury_manager", "Treasury Manager"),

    JobEntry(14, "Culture·HR·Organization", "hr_manager", "HR Manager"),
    JobEntry(14, "Culture·HR·Organization", "talent_manager", "Talent Manager"),
    JobEntry(14, "Culture·HR·Organization", "organizational_development_manager", "Organizational Development Manager"),
    JobEntry(14, "Culture·HR·Organization", "culture_manager", "Culture Manager"),
    JobEntry(14, "Culture·HR·Organization", "recruiter", "Recruiter"),
    JobEntry(14, "Culture·HR·Organization", "learning_and_development_specialist", "Learning & Development Specialist"),

    JobEntry(15, "Automation·Digital Agent", "rpa_agent", "RPA Agent"),
    JobEntry(15, "Automation·Digital Agent", "chatbot_operator", "Chatbot Operator"),
    JobEntry(15, "Automation·Digital Agent", "automated_qa_bot", "Automated QA Bot"),
    JobEntry(15, "Automation·Digital Agent", "report_generation_agent", "Report Generation Agent"),
    JobEntry(15, "Automation·Digital Agent", "monitoring_ai", "Monitoring AI"),
)

JOB_INDEX: MappingProxyType[str, JobEntry] = MappingProxyType({j.job_id: j for j in JOB_GROUPS})

GROUP_ROLE_TEMPLATES: MappingProxyType[int, str] = MappingProxyType(
    {
        1: "Strong in conceptual structuring and strategic direction setting, this profile is well suited for designing large-scale frameworks and guiding decision alignment across complex constraints.",
        2: "Demonstrates data-oriented reasoning with strong pattern extraction and hypothesis testing capacity, making it effective for analytical modeling and evidence-driven problem solving.",
        3: "Shows strength in system architecture and technical integration thinking, enabling efficient translation of requirements into structured, scalable solutions.",
        4: "Excels in problem framing and value-oriented design, combining user perspective with iterative experimentation to refine innovative solutions.",
        5: "Strong in knowledge structuring and explanatory reasoning, supporting effective learning design, conceptual clarity, and instructional organization.",
        6: "Demonstrates contextual interpretation and interpersonal sensitivity, enabling adaptive responses to human behavior and emotionally grounded decision processes.",
        7: "Shows integrative decision-making ability across multiple priorities, supporting leadership roles that require coordination, resource alignment, and long-term direction setting.",
        8: "Strong in persuasive communication and audience-oriented reasoning, enabling effective message framing, influence strategies, and engagement optimization.",
        9: "Demonstrates expressive structuring ability, translating abstract ideas into concrete forms and experiences through visual and narrative organization.",
        10: "Exhibits evidence-based judgment and risk-aware reasoning, supporting decision making in environments requiring accuracy, safety, and procedural reliability.",
        11: "Strong in rule-based reasoning and logical consistency evaluation, enabling precise interpretation of requirements, regulations, and structured argumentation.",
        12: "Shows process optimization and operational stability thinking, supporting efficient workflow design, quality management, and error prevention.",
        13: "Demonstrates quantitative judgment and probabilistic reasoning, enabling structured evaluation of risk, return, and financial decision scenarios.",
        14: "Strong in organizational dynamics interpretation and human system design, supporting talent development, cultural alignment, and team effectiveness.",
        15: "Shows procedural structuring and automation-oriented reasoning, enabling efficient decomposition of tasks into repeatable and monitorable workflows.",
    }
)


def group_id_for(group_name: str) -> int:
    """First group id registered under group_name; 0 when unknown."""
    for job in JOB_GROUPS:
        if job.group_name == group_name:
            return job.group_id
    return 0


def roles_in_group(group_name: str) -> list[str]:
    return [j.job_name for j in JOB_GROUPS if j.group_name == group_name]
