"""Node types, trigger kinds, reference kinds and finding classification enums."""

from __future__ import annotations

from enum import StrEnum


class NodeType(StrEnum):
    """Built-in node types shipped with the default catalog."""

    TRIGGER = "trigger"
    INPUT = "input"
    PROCESS = "process"
    DECISION = "decision"
    TERMINAL = "terminal"
    DATA_STORE = "data_store"
    SERVICE_CALL = "service_call"
    EVENT = "event"
    LOOP = "loop"
    PARALLEL = "parallel"
    COLLECTION = "collection"
    PARSE = "parse"
    CRYPTO = "crypto"
    BATCH = "batch"
    TRANSACTION = "transaction"
    CACHE = "cache"
    DELAY = "delay"
    TRANSFORM = "transform"
    SUB_FLOW = "sub_flow"
    LLM_CALL = "llm_call"
    AGENT_LOOP = "agent_loop"
    GUARDRAIL = "guardrail"
    HUMAN_GATE = "human_gate"
    ORCHESTRATOR = "orchestrator"
    SMART_ROUTER = "smart_router"
    HANDOFF = "handoff"
    AGENT_GROUP = "agent_group"
    IPC_CALL = "ipc_call"


class TriggerKind(StrEnum):
    """Default trigger sub-kinds (carried in the trigger node's spec)."""

    HTTP = "http"
    CRON = "cron"
    EVENT = "event"
    WEBHOOK = "webhook"
    MANUAL = "manual"
    QUEUE = "queue"
    IPC = "ipc"
    WEBSOCKET = "websocket"


class ReferenceKind(StrEnum):
    """External artifacts a node spec may name."""

    SCHEMA = "schema"
    ERROR = "error"
    EVENT = "event"
    FLOW = "flow"
    INTEGRATION = "integration"


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class FindingCode(StrEnum):
    """Stable finding codes emitted by the validator and project checks."""

    # Fatal per-flow parse errors
    MALFORMED_FLOW = "MALFORMED_FLOW"
    DUPLICATE_NODE_ID = "DUPLICATE_NODE_ID"
    UNKNOWN_NODE_TYPE = "UNKNOWN_NODE_TYPE"
    INVALID_NODE_SPEC = "INVALID_NODE_SPEC"

    # Structural
    TRIGGER_CARDINALITY = "TRIGGER_CARDINALITY"
    ORPHAN_NODE = "ORPHAN_NODE"
    DEAD_END = "DEAD_END"
    UNWIRED_PORT = "UNWIRED_PORT"
    UNKNOWN_PORT = "UNKNOWN_PORT"
    AMBIGUOUS_PORT = "AMBIGUOUS_PORT"
    DANGLING_CONNECTION = "DANGLING_CONNECTION"
    UNKNOWN_TRIGGER_KIND = "UNKNOWN_TRIGGER_KIND"
    UNGUARDED_CYCLE = "UNGUARDED_CYCLE"

    # References and project-level
    DANGLING_REFERENCE = "DANGLING_REFERENCE"
    DUPLICATE_FLOW_ID = "DUPLICATE_FLOW_ID"
    UNCONSUMED_EVENT = "UNCONSUMED_EVENT"
