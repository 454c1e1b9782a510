import flet as ft
from src.services.auth_service import AuthService
from src.services.errors import ApiError, TransportError

class LoginPage(ft.Container):
    """Formulário de login do console. Sucesso chama `on_login_success` (a sessão já está gravada)."""

    def __init__(self, page: ft.Page, auth_service: AuthService, on_login_success):
        super().__init__()
        self.page_ref = page
        self.auth_service = auth_service
        self.on_login_success = on_login_success

        self.alignment = ft.alignment.center
        self.padding = 24

        self.txt_email = ft.TextField(
            label="E-mail corporativo",
            keyboard_type=ft.KeyboardType.EMAIL,
            autofocus=True,
            on_submit=lambda e: self.txt_pass.focus(),
        )
        self.txt_pass = ft.TextField(
            label="Senha",
            password=True,
            can_reveal_password=True,
            on_submit=self.attempt_login,
        )
        self.lbl_status = ft.Text(size=12, color=ft.Colors.GREY_600)
        self.btn_login = ft.FilledButton("Entrar", icon=ft.Icons.LOGIN, on_click=self.attempt_login)

        self.content = ft.Card(
            width=420,
            content=ft.Container(
                padding=28,
                content=ft.Column(
                    tight=True,
                    spacing=14,
                    controls=[
                        ft.Row([
                            ft.Icon(ft.Icons.BADGE, color=ft.Colors.INDIGO_700),
                            ft.Text("KMT | Recursos Humanos", size=20, weight=ft.FontWeight.W_600),
                        ]),
                        self.txt_email,
                        self.txt_pass,
                        ft.Row([self.lbl_status, self.btn_login], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ],
                ),
            ),
        )

    def set_busy(self, busy: bool):
        self.btn_login.disabled = busy
        self.lbl_status.value = "Autenticando..." if busy else ""
        self.update()

    def attempt_login(self, e):
        email = (self.txt_email.value or "").strip()
        password = self.txt_pass.value or ""
        if not email or not password:
            self.show_error("Informe e-mail e senha.")
            return

        # Um clique por vez: o botão só volta quando a requisição termina
        self.set_busy(True)
        try:
            self.auth_service.login(email, password)
        except TransportError:
            self.show_error("Servidor indisponível. Verifique sua conexão.")
        except ApiError as err:
            self.show_error(f"Falha no login: {err}")
        else:
            self.on_login_success()
            return
        self.set_busy(False)

    def show_error(self, msg):
        self.page_ref.snack_bar = ft.SnackBar(content=ft.Text(msg), bgcolor=ft.Colors.RED_600)
        self.page_ref.snack_bar.open = True
        self.page_ref.update()
