"""User Directory terminal console"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.prompt import Prompt, IntPrompt
from rich.align import Align
from rich import box

from userdir.app import DirectoryApp
from userdir.core.directory_state import DirectoryState
from userdir.services.photo_validator import load_photo
from userdir.utils.exceptions import PhotoValidationError

console = Console()


class DirectoryConsole:
    """Renders DirectoryState and drives its operations from a menu"""

    def __init__(self, config_dir: str = "config"):
        self.app = DirectoryApp(config_dir)
        self.state: Optional[DirectoryState] = None
        self.running = True

    def initialize_app(self) -> bool:
        try:
            console.print("[bold blue]Initializing User Directory...[/bold blue]")
            self.state = self.app.initialize()
            self.app.start()
            console.print("[bold green]✓ Application initialized[/bold green]\n")
            return True
        except Exception as e:
            console.print(f"[bold red]✗ Initialization failed: {e}[/bold red]\n")
            return False

    def show_error(self) -> None:
        if self.state.error_message:
            console.print(Panel(self.state.error_message, title="Error", border_style="red"))
            self.state.clear_error()

    def show_users(self) -> None:
        state = self.state
        console.clear()
        header = Panel(
            Align.center(Text("Working with GET request", style="bold black")),
            style="on yellow",
            box=box.DOUBLE,
        )
        console.print(header)

        if not state.is_online:
            console.print("[bold red]There is no internet connection[/bold red]")
        elif not state.users:
            console.print("[yellow]There are no users yet[/yellow]")
        else:
            table = Table(box=box.ROUNDED, show_header=True)
            table.add_column("ID", style="dim")
            table.add_column("Name", style="bold")
            table.add_column("Position")
            table.add_column("Email")
            table.add_column("Phone")
            for user in state.users:
                table.add_row(str(user.id), user.name, user.position, user.email, user.phone)
            console.print(table)
            console.print(
                f"Page {state.current_page}/{state.total_pages}"
                + ("" if state.has_more_data else " (end of list)")
            )
        self.show_error()

    def show_positions(self) -> None:
        if not self.state.positions:
            self.state.load_positions()
        table = Table(title="Positions", box=box.ROUNDED)
        table.add_column("ID", style="dim")
        table.add_column("Name")
        for position in self.state.positions:
            marker = "●" if position.id == self.state.selected_position_id else "○"
            table.add_row(str(position.id), f"{marker} {position.name}")
        console.print(table)
        self.show_error()

    def sign_up(self) -> None:
        state = self.state
        console.clear()
        console.print(Panel("Working with POST request", style="on yellow"))

        state.name = Prompt.ask("Your name", default=state.name)
        state.email = Prompt.ask("Email", default=state.email)
        state.phone = Prompt.ask("Phone (+38 (XXX) XXX - XX - XX)", default=state.phone)
        self.show_positions()
        if state.positions:
            ids = [str(p.id) for p in state.positions]
            state.selected_position_id = int(
                Prompt.ask("Select your position", choices=ids, default=str(state.selected_position_id))
            )

        photo_bytes = None
        photo_path = Prompt.ask("Path to photo (70x70 JPEG)", default="")
        if photo_path:
            try:
                photo_bytes = load_photo(photo_path)
            except PhotoValidationError as e:
                console.print(f"[red]{e}[/red]")

        if state.create_user(photo_bytes):
            console.print("[bold green]✓ User successfully registered[/bold green]")
            return

        if state.has_attempted_sign_up:
            for label, valid in (
                ("Name must be 2-60 characters", state.name_field_valid),
                ("Invalid email format", state.email_field_valid),
                ("Required field", state.phone_field_valid),
                ("Photo is required", state.photo_field_valid),
            ):
                if not valid:
                    console.print(f"[red]✗ {label}[/red]")
        self.show_error()

    def show_menu(self) -> None:
        menu_text = """
[bold cyan]Main Menu:[/bold cyan]

[1] Refresh users
[2] Load more users
[3] Sign up
[4] Positions
[Q] Quit
"""
        console.print(Panel(menu_text, title="Menu", border_style="cyan"))
        choice = Prompt.ask("Select option", choices=["1", "2", "3", "4", "q", "Q"], default="2")

        if choice == "1":
            self.state.load_users()
        elif choice == "2":
            if not self.state.load_more_users() and not self.state.has_more_data:
                console.print("[yellow]No more users[/yellow]")
        elif choice == "3":
            self.sign_up()
            IntPrompt.ask("Press 0 to continue", default=0)
        elif choice == "4":
            self.show_positions()
            IntPrompt.ask("Press 0 to continue", default=0)
        elif choice.lower() == "q":
            console.print("[yellow]Goodbye![/yellow]")
            self.running = False

    def run(self) -> None:
        if not self.initialize_app():
            return
        try:
            while self.running:
                self.show_users()
                self.show_menu()
        finally:
            self.app.stop()


def main(config_dir: str = "config") -> None:
    """Main entry point for the console"""
    directory_console = DirectoryConsole(config_dir)
    try:
        directory_console.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Exiting...[/yellow]")


if __name__ == "__main__":
    main()
