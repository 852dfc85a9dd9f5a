from bank_marketing.eda import run_eda


def test_run_eda_writes_figures(bank_df, tmp_path):
    run_eda(bank_df, tmp_path)

    assert (tmp_path / "class_balance.png").exists()
    assert (tmp_path / "subscription_by_category.png").exists()
