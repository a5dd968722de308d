"""
Graduate attribute catalog.

Twelve attributes, each with three proficiency bands over a 0-100 score:
Introductory [0, 60), Intermediate [60, 80), Advanced [80, 100].
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .enums import ADVANCED_THRESHOLD, INTERMEDIATE_THRESHOLD, ProficiencyLevel


@dataclass(frozen=True)
class ProficiencyBand:
    level: ProficiencyLevel
    description: str
    min_score: float
    max_score: float

    def to_dict(self) -> Dict[str, object]:
        return {'level': self.level.value, 'description': self.description,
                'min_score': self.min_score, 'max_score': self.max_score}


@dataclass(frozen=True)
class GraduateAttribute:
    code: str
    name: str
    description: str
    bands: Tuple[ProficiencyBand, ...]

    def band_for(self, score: float) -> ProficiencyBand:
        """Band whose lower bound is the highest one not above ``score``."""
        for band in reversed(self.bands):
            if score >= band.min_score:
                return band
        return self.bands[0]

    def to_dict(self) -> Dict[str, object]:
        return {'code': self.code, 'name': self.name, 'description': self.description,
                'bands': [band.to_dict() for band in self.bands]}


def _bands(introductory: str, intermediate: str, advanced: str) -> Tuple[ProficiencyBand, ...]:
    return (
        ProficiencyBand(ProficiencyLevel.INTRODUCTORY, introductory, 0.0, INTERMEDIATE_THRESHOLD),
        ProficiencyBand(ProficiencyLevel.INTERMEDIATE, intermediate, INTERMEDIATE_THRESHOLD, ADVANCED_THRESHOLD),
        ProficiencyBand(ProficiencyLevel.ADVANCED, advanced, ADVANCED_THRESHOLD, 100.0),
    )


GRADUATE_ATTRIBUTES: Tuple[GraduateAttribute, ...] = (
    GraduateAttribute(
        "GA1", "Engineering Knowledge",
        "Apply the knowledge of mathematics, science, engineering fundamentals, and an engineering "
        "specialization to the solution of complex engineering problems.",
        _bands("Recalls and understands basic engineering concepts",
               "Applies engineering knowledge to solve well-defined problems",
               "Applies comprehensive engineering knowledge to complex problems")),
    GraduateAttribute(
        "GA2", "Problem Analysis",
        "Identify, formulate, review research literature, and analyze complex engineering problems "
        "reaching substantiated conclusions using first principles of mathematics, natural sciences, "
        "and engineering sciences.",
        _bands("Identifies and formulates simple problems",
               "Analyzes moderately complex problems with guidance",
               "Independently analyzes complex engineering problems")),
    GraduateAttribute(
        "GA3", "Design/Development of Solutions",
        "Design solutions for complex engineering problems and design system components or processes "
        "that meet the specified needs with appropriate consideration for the public health and safety, "
        "and the cultural, societal, and environmental considerations.",
        _bands("Designs simple components with guidance",
               "Designs moderately complex systems with some independence",
               "Independently designs complex systems considering all constraints")),
    GraduateAttribute(
        "GA4", "Conduct Investigations",
        "Conduct investigations of complex problems: design experiments, analyze and interpret data, "
        "and synthesize the information to provide valid conclusions.",
        _bands("Conducts simple experiments following procedures",
               "Designs and conducts experiments with guidance",
               "Independently designs and conducts complex investigations")),
    GraduateAttribute(
        "GA5", "Modern Tool Usage",
        "Create, select, and apply appropriate techniques, resources, and modern engineering and IT "
        "tools including prediction and modeling to complex engineering activities with an "
        "understanding of the limitations.",
        _bands("Uses basic tools and software",
               "Selects and uses appropriate tools effectively",
               "Creates and adapts advanced tools for complex problems")),
    GraduateAttribute(
        "GA6", "The Engineer and Society",
        "Apply reasoning informed by the contextual knowledge to assess societal, health, safety, legal "
        "and cultural issues and the consequent responsibilities relevant to the professional "
        "engineering practice.",
        _bands("Identifies basic societal and safety issues",
               "Analyzes societal impact with guidance",
               "Comprehensively evaluates all societal considerations")),
    GraduateAttribute(
        "GA7", "Environment and Sustainability",
        "Understand the impact of the professional engineering solutions in societal and environmental "
        "contexts, and demonstrate the knowledge of, and need for sustainable development.",
        _bands("Recognizes environmental impact",
               "Considers sustainability in solutions",
               "Integrates comprehensive sustainability principles")),
    GraduateAttribute(
        "GA8", "Ethics",
        "Apply ethical principles and commit to professional ethics and responsibilities and norms of "
        "the engineering practice.",
        _bands("Understands basic ethical principles",
               "Applies ethical reasoning to common situations",
               "Demonstrates ethical leadership in complex scenarios")),
    GraduateAttribute(
        "GA9", "Individual and Team Work",
        "Function effectively as an individual, and as a member or leader in diverse teams, and in "
        "multidisciplinary settings.",
        _bands("Participates effectively in teams",
               "Contributes meaningfully to team objectives",
               "Leads diverse teams effectively")),
    GraduateAttribute(
        "GA10", "Communication",
        "Communicate effectively on complex engineering activities with the engineering community and "
        "with society at large, such as, being able to comprehend and write effective reports and "
        "design documentation, make effective presentations, and give and receive clear instructions.",
        _bands("Communicates basic technical information clearly",
               "Presents complex information effectively",
               "Communicates expertly with all stakeholders")),
    GraduateAttribute(
        "GA11", "Project Management and Finance",
        "Demonstrate knowledge and understanding of the engineering and management principles and apply "
        "these to one's own work, as a member and leader in a team, to manage projects and in "
        "multidisciplinary environments.",
        _bands("Understands basic project management concepts",
               "Applies project management to moderate complexity",
               "Manages complex multidisciplinary projects")),
    GraduateAttribute(
        "GA12", "Life-long Learning",
        "Recognize the need for, and have the preparation and ability to engage in independent and "
        "life-long learning in the broadest context of technological change.",
        _bands("Recognizes need for continuous learning",
               "Actively pursues learning opportunities",
               "Demonstrates autonomous learning and adaptation")),
)


def graduate_attribute(code: str) -> Optional[GraduateAttribute]:
    for attribute in GRADUATE_ATTRIBUTES:
        if attribute.code == code:
            return attribute
    return None
