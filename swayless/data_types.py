from typing import Literal, NotRequired, TypedDict


class Rectangle(TypedDict):
    x: int
    y: int
    width: int
    height: int


class Output(TypedDict):
    name: str
    active: bool
    focused: NotRequired[bool]
    current_workspace: str | None
    rect: NotRequired[Rectangle]


class Workspace(TypedDict):
    id: int
    num: int
    name: str
    output: str
    focused: bool
    visible: bool
    urgent: NotRequired[bool]


class Node(TypedDict):
    """
    Any node of the layout tree: root, output, workspace or container.
    Only the fields read here are listed.
    """

    id: int
    type: Literal["root", "output", "workspace", "con", "floating_con"]
    name: str | None
    focused: bool
    nodes: list["Node"]
    floating_nodes: list["Node"]


class CommandResult(TypedDict):
    success: bool
    parse_error: NotRequired[bool]
    error: NotRequired[str]


class WorkspaceEvent(TypedDict):
    change: str
    current: Workspace | None
    old: NotRequired[Workspace | None]
