import flet as ft
import flash10.app as ReviewApp


def main(page: ft.Page):
    ReviewApp.main(page)

if __name__ == "__main__":
    ft.app(target=main)
