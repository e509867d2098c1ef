"""Rich renderables for menus and record listings"""

from typing import Iterable, List, Sequence, Tuple

from rich import box
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..models import Application, ApplicationStatus, Pet, User

_STATUS_STYLE = {
    ApplicationStatus.PENDING: "yellow",
    ApplicationStatus.APPROVED: "green",
    ApplicationStatus.REJECTED: "red",
}


def menu_panel(title: str, options: Sequence[Tuple[str, str]]) -> Panel:
    """Numbered menu; options are (key, label) pairs"""
    lines = [f"[bold cyan]{key}.[/bold cyan] {escape(label)}" for key, label in options]
    return Panel("\n".join(lines), title=f"[bold]{escape(title)}[/bold]", border_style="cyan", expand=False)


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def pets_table(rows: Iterable[Tuple[int, Pet]], title: str, show_status: bool = True) -> Table:
    table = Table(title=title, box=box.ROUNDED, show_header=True)
    table.add_column("#", style="cyan", width=4)
    table.add_column("Name", style="white")
    table.add_column("Breed", style="white")
    table.add_column("Age", justify="right")
    table.add_column("Vaccinated")
    if show_status:
        table.add_column("Status")

    for number, pet in rows:
        cells = [
            str(number),
            escape(pet.name),
            escape(pet.breed),
            str(pet.age),
            _yes_no(pet.vaccinated),
        ]
        if show_status:
            cells.append("[red]Adopted[/red]" if pet.adopted else "[green]Available[/green]")
        table.add_row(*cells)
    return table


def applications_table(rows: Iterable[Tuple[int, Application]], title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED, show_header=True)
    table.add_column("#", style="cyan", width=4)
    table.add_column("ID", justify="right")
    table.add_column("User")
    table.add_column("Pet")
    table.add_column("Status")

    for number, application in rows:
        style = _STATUS_STYLE[application.status]
        table.add_row(
            str(number),
            str(application.id),
            escape(application.applicant_username),
            escape(application.pet_name),
            f"[{style}]{application.status.value}[/{style}]",
        )
    return table


def users_table(users: List[User], title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED, show_header=True)
    table.add_column("#", style="cyan", width=4)
    table.add_column("Username")
    table.add_column("Role")

    for number, user in enumerate(users, 1):
        table.add_row(str(number), escape(user.username), user.role.label)
    return table
