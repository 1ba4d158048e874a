"""Default quest types, achievement ladder and starter subjects for new users."""

from questlog.schemas.progress import AchievementTier, QuestType, Resource, SubjectConfig


def default_quest_types() -> list[QuestType]:
    return [
        QuestType(id="easy", name="Easy", duration=15, xp=10, emoji="🌟"),
        QuestType(id="medium", name="Medium", duration=30, xp=25, emoji="⚡"),
        QuestType(id="hard", name="Hard", duration=60, xp=50, emoji="🏆"),
    ]


def default_achievements() -> list[AchievementTier]:
    return [
        AchievementTier(id="first_step", name="First Step", emoji="🌟", streak_required=0),
        AchievementTier(id="on_fire", name="On Fire", emoji="🔥", streak_required=3),
        AchievementTier(id="power_user", name="Power User", emoji="⚡", streak_required=7),
        AchievementTier(id="champion", name="Champion", emoji="🏆", streak_required=14),
        AchievementTier(id="master", name="Master", emoji="💎", streak_required=30),
        AchievementTier(id="legend", name="Legend", emoji="👑", streak_required=60),
    ]


def default_subjects() -> list[SubjectConfig]:
    """Starter subjects seeded for every newly registered user."""
    return [
        SubjectConfig(
            id="japanese",
            name="Japanese",
            emoji="🇯🇵",
            color="#E53E3E",
            pip_amount=15,
            target_hours=1,
            quest_types=default_quest_types(),
            achievements=default_achievements(),
            resources=[
                Resource(id="1", title="Tae Kim - Complete Grammar Guide", url="https://www.guidetojapanese.org/learn/grammar", priority="H"),
                Resource(id="2", title="NHK Easy News", url="https://www3.nhk.or.jp/news/easy/", priority="H"),
                Resource(id="3", title="Jisho", url="https://jisho.org/", priority="H"),
                Resource(id="4", title="Anki", url="https://apps.ankiweb.net/", priority="H"),
            ],
        ),
        SubjectConfig(
            id="programming",
            name="Programming",
            emoji="💻",
            color="#38A169",
            pip_amount=20,
            target_hours=1.5,
            quest_types=default_quest_types(),
            achievements=default_achievements(),
            resources=[
                Resource(id="1", title="MDN Web Docs", url="https://developer.mozilla.org/", priority="H"),
                Resource(id="2", title="JavaScript.info", url="https://javascript.info/", priority="H"),
                Resource(id="3", title="FreeCodeCamp", url="https://www.freecodecamp.org/", priority="H"),
                Resource(id="4", title="Stack Overflow", url="https://stackoverflow.com/", priority="M"),
            ],
        ),
        SubjectConfig(
            id="math",
            name="Mathematics",
            emoji="🧮",
            color="#3182CE",
            pip_amount=25,
            target_hours=1,
            quest_types=default_quest_types(),
            achievements=default_achievements(),
            resources=[
                Resource(id="1", title="Khan Academy", url="https://www.khanacademy.org/", priority="H"),
                Resource(id="2", title="Wolfram Alpha", url="https://www.wolframalpha.com/", priority="H"),
                Resource(id="3", title="Desmos Calculator", url="https://www.desmos.com/", priority="M"),
                Resource(id="4", title="PatrickJMT", url="https://patrickjmt.com/", priority="M"),
            ],
        ),
    ]
