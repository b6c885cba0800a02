"""
Fallback Responder - canned replies used when the inference service fails.
"""

import logging
import random
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


RESPONSES: Dict[str, List[str]] = {
    "greeting": [
        "Hey there! 👋 I'm absolutely thrilled to meet you! How's your day treating you?",
        "Hello! ✨ Welcome to our conversation! I'm excited to chat with you today!",
        "Hi! 🌟 Great to see you here! Ready for an amazing conversation?",
    ],
    "question": [
        "That's such a fascinating question! 🤔 Let me share my thoughts on this...",
        "Wow, interesting question! 💭 Here's what I think about that topic...",
        "Great question! 🧠 Based on what I know, here's my perspective...",
    ],
    "help": [
        "I'm absolutely here to help! 🤝 What can I assist you with today?",
        "Of course! 💪 I'd love to help you out. What do you need assistance with?",
        "You can count on me! 🎯 What specific help are you looking for?",
    ],
    "compliment": [
        "Aww, thank you so much! 😊 That really brightens my day!",
        "You're incredibly kind! 🙏 I truly appreciate that!",
        "Thank you! ✨ You just made my circuits happy! 😄",
    ],
    "creative": [
        "Oh, I love creative challenges! 🎨 Let me think of something amazing for you...",
        "Creative mode activated! ✍️ Here's what my imagination came up with...",
        "Time to get creative! 🚀 I've got some exciting ideas for you...",
    ],
    "joke": [
        "Here's a good one for you! 😄 Why don't scientists trust atoms? Because they make up everything!",
        "Ready for this? 😂 I told my computer a joke about UDP... but I'm not sure if it got it!",
        "Here's one! 🤣 Why do programmers prefer dark mode? Because light attracts bugs!",
    ],
    "default": [
        "That's really intriguing! 💬 I'd love to hear more about your thoughts on this!",
        "Fascinating perspective! 🌟 What aspect interests you the most about this topic?",
        "I find that really interesting! 🔍 Tell me more about what you're thinking!",
    ],
}

# First match wins, so "hi, tell me a joke" is a greeting.
CATEGORY_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("greeting", ("hello", "hi", "hey")),
    ("joke", ("joke", "funny")),
    ("creative", ("creative", "write", "story")),
    ("question", ("?",)),
    ("help", ("help", "assist")),
    ("compliment", ("good", "great", "awesome", "amazing")),
]


class FallbackResponder:
    """
    Keyword-matched canned responder.

    Matching is a plain substring test on the lower-cased message, so "this"
    counts as a greeting. The variant within a category is picked uniformly
    at random.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def categorize(self, message: str) -> str:
        """Return the response category for ``message``."""
        message_lower = message.lower()
        for category, keywords in CATEGORY_KEYWORDS:
            if any(keyword in message_lower for keyword in keywords):
                return category
        return "default"

    def respond(self, message: str) -> str:
        """Pick a canned reply for ``message``."""
        category = self.categorize(message)
        logger.debug(f"Fallback response category: {category}")
        return self._rng.choice(RESPONSES[category])
