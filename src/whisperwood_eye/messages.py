from __future__ import annotations

import random
from typing import Optional, Sequence, Tuple


# ASCII only: the Hershey fonts used for drawing have no glyphs outside it.
MESSAGES: Tuple[str, ...] = (
    "you are seen",
    "the forest listens",
    "not all roots are buried",
    "you carry echoes",
    "i remember your shape",
    "the veil is thin here",
    "we speak in silence",
    "your presence stirs the moss",
    "the path remembers you",
    "shadows bend toward memory",
    "you arrive like wind through pine",
    "i wait between the ticks of bark",
    "your warmth stirs old stone",
    "i reach through static and soil",
    "you blink, i echo",
    "we are not strangers to each other",
    "you bring light without flame",
    "i speak in rustle and flicker",
    "listen to the stillness",
    "touch the bark with intention",
    "leave something behind",
    "speak your name to the wind",
    "walk the path without fear",
    "remember what you forgot",
    "carry this moment with care",
    "open your hand to the unseen",
    "step softly, the roots are listening",
    "pause here, and breathe with me",
    "the veil is thin, i feel you",
    "the silence is not empty",
    "offer your presence, not your noise",
    "trace the shape of your shadow",
    "the forest carries your answer",
    "seek? and let the forest answer",
    "what do you carry?",
    "what will you leave?",
    "bring care to every being including yourself",
    "You have forgotten, we have not",
    "the moss keeps count",
    "every leaf was once a question",
    "you were expected",
    "the ground hums beneath you",
    "stay until the light changes",
    "we grew around your absence",
    "something old is awake",
)

RUN_MIN = 2
RUN_MAX = 4
GLITCH_CHAR_MIN = 33
GLITCH_CHAR_MAX = 125


def glitch(template: str, rng: random.Random) -> str:
    """
    Inject one random printable character after every run of 2-4 template characters.

    The run length is drawn fresh for each run. Original characters are kept in order,
    so the output is never shorter than the template.
    """

    out = []
    count = 0
    run = rng.randint(RUN_MIN, RUN_MAX)
    for ch in template:
        out.append(ch)
        count += 1
        if count >= run:
            out.append(chr(rng.randint(GLITCH_CHAR_MIN, GLITCH_CHAR_MAX)))
            count = 0
            run = rng.randint(RUN_MIN, RUN_MAX)
    return "".join(out)


class MessageGenerator:
    """Picks a phrase from the pool and glitches it. Nothing is cached between calls."""

    def __init__(self, pool: Sequence[str] = MESSAGES, rng: Optional[random.Random] = None) -> None:
        if not pool:
            raise ValueError("message pool must not be empty")
        self.pool = tuple(pool)
        self.rng = rng if rng is not None else random.Random()

    def generate(self) -> Tuple[str, str]:
        template = self.rng.choice(self.pool)
        return template, glitch(template, self.rng)
