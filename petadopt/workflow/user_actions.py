"""Regular user dashboard actions"""

from typing import TYPE_CHECKING

from .views import applications_table, pets_table

if TYPE_CHECKING:
    from .engine import WorkflowEngine


def browse_pets(ctx: "WorkflowEngine") -> None:
    """List unadopted pets; picking one files a pending application"""
    ctx.show_menu("AVAILABLE PETS", [("0", "Back")])
    available = ctx.store.available_pets()
    if not available:
        ctx.say("No pets available for adoption.")
        return

    ctx.console.print(
        pets_table(((n, pet) for n, (_, pet) in enumerate(available, 1)), "Available Pets", show_status=False)
    )
    choice = ctx.choose("Select pet to apply for adoption (0 to cancel): ", 0, len(available))
    if not choice:
        return

    _, pet = available[choice - 1]
    application = ctx.store.create_application(ctx.session.username, pet.name)
    ctx.say(f"Application #{application.id} submitted for {pet.name}!", "bold green")


def check_status(ctx: "WorkflowEngine") -> None:
    ctx.show_menu("APPLICATION STATUS", [("0", "Back")])
    mine = ctx.store.applications_for(ctx.session.username)
    if not mine:
        ctx.say("No applications found.")
        return
    ctx.console.print(applications_table(enumerate(mine, 1), "Your Applications"))


def view_history(ctx: "WorkflowEngine") -> None:
    ctx.show_menu("ADOPTION HISTORY", [("0", "Back")])
    adopted = ctx.store.adopted_pets()
    if not adopted:
        ctx.say("No adoption history found.")
        return
    ctx.console.print(pets_table(enumerate(adopted, 1), "Adopted Pets"))
