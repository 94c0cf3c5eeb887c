# narration.py
import pandas as pd


def step(n: int, title: str) -> None:
    print("\n" + "=" * 60)
    print(f"STEP {n}: {title}")
    print("=" * 60)


def show(df: pd.DataFrame, title: str = None, digits: int = 4) -> None:
    if title:
        print(f"\n{title}:")
    with pd.option_context("display.precision", digits, "display.width", 120):
        print(df.to_string())
