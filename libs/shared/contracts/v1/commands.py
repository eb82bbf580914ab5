from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator


class CommandName(StrEnum):
    """Request verbs understood by the timer server."""

    START_TIMER = "starttimer"
    START_OR_SPLIT = "startorsplit"
    SPLIT = "split"
    UNSPLIT = "unsplit"
    SKIP_SPLIT = "skipsplit"
    PAUSE = "pause"
    RESUME = "resume"
    RESET = "reset"
    INIT_GAME_TIME = "initgametime"
    SET_GAME_TIME = "setgametime"
    SET_LOADING_TIMES = "setloadingtimes"
    PAUSE_GAME_TIME = "pausegametime"
    UNPAUSE_GAME_TIME = "unpausegametime"
    SET_COMPARISON = "setcomparison"
    GET_DELTA = "getdelta"
    GET_LAST_SPLIT_TIME = "getlastsplittime"
    GET_COMPARISON_SPLIT_TIME = "getcomparisonsplittime"
    GET_CURRENT_TIME = "getcurrenttime"
    GET_FINAL_TIME = "getfinaltime"
    GET_PREDICTED_TIME = "getpredictedtime"
    GET_BEST_POSSIBLE_TIME = "getbestpossibletime"
    GET_SPLIT_INDEX = "getsplitindex"
    GET_CURRENT_SPLIT_NAME = "getcurrentsplitname"
    GET_PREVIOUS_SPLIT_NAME = "getprevioussplitname"
    GET_CURRENT_TIMER_PHASE = "getcurrenttimerphase"


# Verbs that are answered with exactly one response line.
QUERY_COMMANDS: frozenset[CommandName] = frozenset(
    name for name in CommandName if name.value.startswith("get")
)


class TimerCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: CommandName
    args: tuple[str, ...] = ()

    @field_validator("args")
    @classmethod
    def _single_line_args(cls, args: tuple[str, ...]) -> tuple[str, ...]:
        for arg in args:
            if "\r" in arg or "\n" in arg:
                raise ValueError(f"argument must not contain CR/LF: {arg!r}")
        # an empty optional argument is dropped instead of sent as a trailing space
        return tuple(arg for arg in args if arg)

    @property
    def is_query(self) -> bool:
        return self.name in QUERY_COMMANDS

    def tokens(self) -> tuple[str, ...]:
        return (self.name.value, *self.args)
