import logging
import flet as ft
from src.config import get_config
from src.data.kv_store import KVStore
from src.models.usuario import UserRole
from src.services.auth_service import AuthService, build_api
from src.services.errors import ApiError
from src.services.permissions import Capability
from src.services.route_guard import RouteGuard
from src.services.session_store import SessionStore
from src.ui.pages.login_page import LoginPage

logging.basicConfig(level=logging.INFO)

# Rotas que exigem papel específico (as demais só exigem login)
ROUTE_ROLES = {
    "/employees": [UserRole.GENERAL_MANAGER, UserRole.HR_MANAGER],
}

def main(page: ft.Page):
    page.title = "KMT - Console de RH"
    page.theme_mode = ft.ThemeMode.LIGHT

    config = get_config()
    try:
        session = SessionStore(KVStore(config.session_db))
    except Exception as e:
        page.add(ft.Text(f"Erro de Setup: {e}", color="red"))
        return

    api = build_api(config, session, page)
    auth = AuthService(api, session)
    guard = RouteGuard(session, page, config.login_route, config.home_route)

    # Sessão pela metade (token sem usuário etc.) é descartada no bootstrap
    auth.restore()

    def load_names(endpoint, label: str) -> ft.Control:
        if not session.is_authenticated():
            return ft.Text("Sessão encerrada.", italic=True, color=ft.Colors.GREY_500)
        try:
            items = endpoint.list()
        except ApiError as e:
            # 401 já foi tratado pelo interceptor (limpa sessão e vai para o login)
            return ft.Text(f"Erro ao carregar {label}: {e}", color=ft.Colors.RED)
        if not items:
            return ft.Text(f"Nenhum registro em {label}.", italic=True, color=ft.Colors.GREY_500)
        return ft.ListView(
            expand=True,
            spacing=5,
            controls=[ft.ListTile(title=ft.Text(getattr(i, "name", None) or getattr(i, "email", ""))) for i in items],
        )

    def route_change(route):
        page.views.clear()

        if page.route == config.login_route:
            target = guard.login_route_target()
            if target:
                page.go(target)
                return
            page.views.append(
                ft.View(
                    config.login_route,
                    [LoginPage(page, auth, on_login_success=lambda: page.go(config.home_route))],
                    vertical_alignment=ft.MainAxisAlignment.CENTER,
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER
                )
            )
            page.update()
            return

        if page.route == "/":
            page.go(config.home_route)
            return

        if not guard.enforce(ROUTE_ROLES.get(page.route)):
            return

        current_user = session.get_user()
        capabilities = session.get_permissions(current_user)

        my_tabs = [ft.Tab(text="Departamentos", icon=ft.Icons.APARTMENT, content=load_names(api.departments, "departamentos"))]
        if Capability.MANAGE_EMPLOYEES in capabilities:
            my_tabs.append(ft.Tab(text="Funcionários", icon=ft.Icons.PEOPLE, content=load_names(api.employees, "funcionários")))
        if Capability.MANAGE_ROLES in capabilities:
            my_tabs.append(ft.Tab(text="Papéis", icon=ft.Icons.SECURITY, content=load_names(api.roles, "papéis")))

        # Um 401 durante a carga já trocou para a view de login: não desenha o dashboard por cima
        if not session.is_authenticated():
            return

        page.views.append(
            ft.View(
                page.route,
                [
                    ft.AppBar(
                        title=ft.Text(f"Olá, {current_user.name if current_user else ''}"),
                        bgcolor=ft.Colors.BLUE_700,
                        color=ft.Colors.WHITE,
                        actions=[
                            ft.IconButton(ft.Icons.LOGOUT, on_click=logout_click)
                        ]
                    ),
                    ft.Tabs(tabs=my_tabs, expand=True, animation_duration=300),
                ]
            )
        )
        page.update()

    def view_pop(view):
        page.views.pop()
        top_view = page.views[-1]
        page.go(top_view.route)

    def logout_click(e):
        auth.logout()
        page.go(config.login_route)

    page.on_route_change = route_change
    page.on_view_pop = view_pop
    page.go(config.home_route if session.is_authenticated() else config.login_route)

if __name__ == "__main__":
    ft.app(target=main)
