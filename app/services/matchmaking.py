"""
Coach/student matchmaking.

A plain heuristic: Jaccard word overlap between free-text fields, blended
with how well a coach's years of experience cover the player's skill level.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session
from app.models.profile import Profile
from app.models.coach import CoachStudentRelationship
import structlog

logger = structlog.get_logger()

TEXT_WEIGHT = 0.6
EXPERIENCE_WEIGHT = 0.4
DEFAULT_THRESHOLD = 0.5
DEFAULT_SKILL_LEVEL = 5

# Scanned in order, first hit wins
SKILL_KEYWORDS = [
    ("beginner", 2),
    ("novice", 2),
    ("intermediate", 5),
    ("advanced", 8),
    ("expert", 10),
    ("professional", 10),
]


@dataclass
class MatchResult:
    candidate_id: str
    username: str
    display_name: str
    bio: Optional[str]
    avatar_url: Optional[str]
    years_coaching: Optional[int]
    similarity_score: float
    match_reason: str

    def to_dict(self) -> Dict:
        return asdict(self)


def tokenize(text: Optional[str]) -> set:
    return set((text or "").lower().split())


def text_similarity(text1: Optional[str], text2: Optional[str]) -> float:
    """Jaccard similarity of the lower-cased word sets, 0..1."""
    words1 = tokenize(text1)
    words2 = tokenize(text2)
    union = words1 | words2
    if not union:
        # Identical empty inputs
        return 1.0
    return len(words1 & words2) / len(union)


def extract_skill_level(text: Optional[str]) -> int:
    """Skill on a 0-10 scale from the first ladder keyword found in the text."""
    if not text:
        return DEFAULT_SKILL_LEVEL

    lower_text = text.lower()
    for keyword, level in SKILL_KEYWORDS:
        if keyword in lower_text:
            return level
    return DEFAULT_SKILL_LEVEL


def experience_fit(years_coaching: Optional[float], skill_level: float) -> float:
    return min(1.0, (years_coaching or 0) / max(skill_level, 1))


def combined_score(similarity: float, skill_fit: float) -> float:
    return similarity * TEXT_WEIGHT + skill_fit * EXPERIENCE_WEIGHT


def match_reason(similarity: float, years_coaching: Optional[int]) -> str:
    similarity_percent = round(similarity * 100)
    experience = years_coaching or 0

    if similarity_percent >= 80:
        label = "Excellent match"
    elif similarity_percent >= 60:
        label = "Good match"
    else:
        label = "Fair match"
    return f"{label} ({similarity_percent}% profile fit, {experience} years experience)"


def coach_years(profile: Profile) -> int:
    years = profile.years_coaching or 0
    if profile.coach_profile is not None:
        years = max(years, profile.coach_profile.years_coaching or 0)
    return years


def rank_coaches(seeker_text: str, coaches: Iterable[Profile], threshold: float = DEFAULT_THRESHOLD) -> List[MatchResult]:
    skill_level = extract_skill_level(seeker_text)
    matches = []
    for coach in coaches:
        years = coach_years(coach)
        similarity = text_similarity(seeker_text, coach.bio)
        fit = experience_fit(years, skill_level)
        matches.append(MatchResult(
            candidate_id=coach.id,
            username=coach.username,
            display_name=coach.display_name or coach.username,
            bio=coach.bio,
            avatar_url=coach.avatar_url,
            years_coaching=years,
            similarity_score=combined_score(similarity, fit),
            match_reason=match_reason(similarity, years)
        ))
    return _filter_and_sort(matches, threshold)


def rank_students(coach_text: str, players: Iterable[Profile], threshold: float = DEFAULT_THRESHOLD) -> List[MatchResult]:
    matches = []
    for player in players:
        similarity = text_similarity(coach_text, player.bio)
        matches.append(MatchResult(
            candidate_id=player.id,
            username=player.username,
            display_name=player.display_name or player.username,
            bio=player.bio,
            avatar_url=player.avatar_url,
            years_coaching=None,
            similarity_score=similarity,
            match_reason=f"{round(similarity * 100)}% teaching style match"
        ))
    return _filter_and_sort(matches, threshold)


def _filter_and_sort(matches: List[MatchResult], threshold: float) -> List[MatchResult]:
    kept = [match for match in matches if match.similarity_score >= threshold]
    # sorted() is stable, equal scores keep candidate order
    return sorted(kept, key=lambda match: match.similarity_score, reverse=True)


class MatchmakingService:
    def __init__(self, db: Session):
        self.db = db

    def find_matching_coaches(
        self,
        player_id: str,
        player_answers: Dict[str, str],
        threshold: float = DEFAULT_THRESHOLD
    ) -> List[MatchResult]:
        coaches = [
            coach for coach in self.db.query(Profile).filter(
                Profile.role == "coach",
                Profile.status == "active",
                Profile.id != player_id
            ).all()
            if coach_years(coach) > 0
        ]
        if not coaches:
            return []

        answers_text = " ".join(value for value in player_answers.values() if value)
        matches = rank_coaches(answers_text, coaches, threshold)

        logger.info(
            "Matched coaches for player",
            player_id=player_id,
            candidates=len(coaches),
            matches=len(matches),
            threshold=threshold
        )
        return matches

    def find_matching_students(
        self,
        coach_id: str,
        coach_fields: Dict[str, str],
        threshold: float = DEFAULT_THRESHOLD
    ) -> List[MatchResult]:
        players = self.db.query(Profile).filter(
            Profile.role == "player",
            Profile.status == "active",
            Profile.id != coach_id
        ).all()
        if not players:
            return []

        coach_text = " ".join(value for value in coach_fields.values() if value)
        matches = rank_students(coach_text, players, threshold)

        logger.info(
            "Matched students for coach",
            coach_id=coach_id,
            candidates=len(players),
            matches=len(matches),
            threshold=threshold
        )
        return matches

    def get_recommendations(self, user_id: str, role: str, limit: int = 5) -> List[MatchResult]:
        profile = self.db.query(Profile).filter(Profile.id == user_id).first()
        if profile is None:
            return []

        answers = {
            "bio": profile.bio or "",
            "experience": f"{profile.years_coaching or 0} years",
        }
        if role == "player":
            matches = self.find_matching_coaches(user_id, answers)
        else:
            matches = self.find_matching_students(user_id, answers)
        return matches[:limit]

    def create_connection(self, coach_id: str, student_id: str) -> CoachStudentRelationship:
        relationship = CoachStudentRelationship(
            coach_id=coach_id,
            student_id=student_id,
            status="pending"
        )
        self.db.add(relationship)
        self.db.commit()
        self.db.refresh(relationship)

        logger.info("Created coach/student connection", coach_id=coach_id, student_id=student_id)
        return relationship
