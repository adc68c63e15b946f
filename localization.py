import random
from typing import Optional


class Translator:
    """Message catalog for notification texts and motivational quotes."""

    def __init__(self, language: str = "en") -> None:
        self.language = language
        self.translations = {
            "en": {
                "weekly_summary_title": "📊 Your weekly summary",
                "weekly_summary_none": "You haven't trained this week yet. Let's get started! 💪",
                "weekly_summary_one": "You trained 1 day this week. A good start, you can do more next week! 🎯",
                "weekly_summary_champion": "You trained {count} days this week, great job! You're a champion! 🏆",
                "weekly_summary_some": "You trained {count} days this week, great job! 💪",
                "motivation_title": "🔥 We miss you!",
            },
            "tr": {
                "weekly_summary_title": "📊 Haftalık Özetin",
                "weekly_summary_none": "Bu hafta henüz antrenman yapmadın. Hadi başlayalım! 💪",
                "weekly_summary_one": "Bu hafta 1 gün antrenman yaptın. Gelecek hafta daha fazlasını yapabilirsin! 🎯",
                "weekly_summary_champion": "Bu hafta {count} gün antrenman yaptın, harika iş! Sen bir şampiyonsun! 🏆",
                "weekly_summary_some": "Bu hafta {count} gün antrenman yaptın, harika iş! 💪",
                "motivation_title": "🔥 Seni Özledik!",
            },
        }
        self.pools = {
            "en": {
                "motivation": [
                    "We missed you! 💪 Ready to get back to training?",
                    "Hey champion! 🏆 It's been 3 days. Today is a great day for a workout!",
                    "Keep going to reach your goals! 🎯 We're waiting for you!",
                    "Your muscles are calling! 💪 Let's start today!",
                ],
                "quotes": [
                    "Strength comes from overcoming the will to quit.",
                    "Success is the sum of daily effort.",
                    "Your body can do it; you just have to convince your mind.",
                    "What you do today is tomorrow's success.",
                    "Your biggest rival is who you were yesterday.",
                    "Pain is temporary, pride is forever.",
                    "No giving up, only progress.",
                    "Every rep is one step closer to the goal.",
                ],
            },
            "tr": {
                "motivation": [
                    "Seni özledik! 💪 Antrenmana geri dönmeye hazır mısın?",
                    "Hey şampiyon! 🏆 3 gündür görüşemedik. Bugün harika bir antrenman günü!",
                    "Hedeflerine ulaşmak için devam et! 🎯 Seni bekliyoruz!",
                    "Kasların seni çağırıyor! 💪 Hadi bugün başlayalım!",
                ],
                "quotes": [
                    "Güç, iradeyi yenmekten gelir.",
                    "Başarı, günlük çabanın sonucudur.",
                    "Vücudun yapabileceklerinin sınırı yoktur, sadece zihnini ikna etmelisin.",
                    "Bugün yaptıkların yarının başarısıdır.",
                    "En büyük rakibin dünkü kendindir.",
                    "Acı geçicidir, gurur kalıcıdır.",
                    "Vazgeçmek yok, sadece ilerleme var.",
                    "Her tekrar, hedefe bir adım daha yaklaşmaktır.",
                ],
            },
        }

    def _catalog(self, table: dict) -> dict:
        return table.get(self.language) or table["en"]

    def gettext(self, key: str, **params) -> str:
        text = self._catalog(self.translations).get(key)
        if text is None:
            text = self.translations["en"].get(key, key)
        return text.format(**params) if params else text

    def pool(self, name: str) -> list[str]:
        return list(self._catalog(self.pools)[name])

    def choice(self, name: str, rng: Optional[random.Random] = None) -> str:
        """Return a random entry of pool ``name``."""
        return (rng or random).choice(self.pool(name))

    def weekly_summary_body(self, workout_count: int) -> str:
        if workout_count <= 0:
            return self.gettext("weekly_summary_none")
        if workout_count == 1:
            return self.gettext("weekly_summary_one")
        if workout_count >= 5:
            return self.gettext("weekly_summary_champion", count=workout_count)
        return self.gettext("weekly_summary_some", count=workout_count)

    def quote_of_the_day(self, rng: Optional[random.Random] = None) -> str:
        return self.choice("quotes", rng)
