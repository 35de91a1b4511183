from enum import Enum


class Language(str, Enum):
    JAVA = "java"


class ExecutionStatus(str, Enum):
    SUCCESS = "SUCCESS"
    RUNTIME_FAILURE = "RUNTIME_FAILURE"
    INFRA_FAILURE = "INFRA_FAILURE"
    COMPILE_FAILURE = "COMPILE_FAILURE"


class CaseOutcome(str, Enum):
    SUCCESS = "SUCCESS"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    TIMEOUT = "TIMEOUT"
    # not attempted, the session died on an earlier case
    ABORTED = "ABORTED"


class Backend(str, Enum):
    HOST = "host"
    CONTAINER = "container"


# canonical entry point file per language
SOURCE_FILENAME = {
    Language.JAVA: "Main.java",
}
ENTRY_CLASS = {
    Language.JAVA: "Main",
}
