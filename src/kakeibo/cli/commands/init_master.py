"""Initialize subcategory and merchant master data."""

import click

from kakeibo.cli.error_handling import handle_domain_error
from kakeibo.domain.entities import CategoryType, Merchant, Subcategory
from kakeibo.domain.errors import DomainError
from kakeibo.domain.master_data import MasterDataService

INCOME = CategoryType.INCOME
EXPENSE = CategoryType.EXPENSE
TRANSFER = CategoryType.TRANSFER
REPAYMENT = CategoryType.REPAYMENT
INVESTMENT = CategoryType.INVESTMENT

# (id, category type, name, parent id, display order, is default)
INITIAL_SUBCATEGORIES = [
    # Income
    ("income_salary", INCOME, "給与・賞与", None, 1, False),
    ("income_business", INCOME, "事業収入", None, 2, False),
    ("income_other", INCOME, "その他収入", None, 99, True),
    # Expense
    ("food", EXPENSE, "食費", None, 1, False),
    ("food_groceries", EXPENSE, "食料品", "food", 1, False),
    ("food_dining_out", EXPENSE, "外食", "food", 2, False),
    ("food_cafe", EXPENSE, "カフェ・喫茶店", "food", 3, False),
    ("daily", EXPENSE, "日用品", None, 2, False),
    ("daily_supplies", EXPENSE, "生活用品", "daily", 1, False),
    ("daily_clothes", EXPENSE, "衣料品", "daily", 2, False),
    ("transport", EXPENSE, "交通費", None, 3, False),
    ("transport_train_bus", EXPENSE, "電車・バス", "transport", 1, False),
    ("transport_taxi", EXPENSE, "タクシー", "transport", 2, False),
    ("transport_parking", EXPENSE, "駐車場", "transport", 3, False),
    ("communication", EXPENSE, "通信費", None, 4, False),
    ("communication_mobile", EXPENSE, "携帯電話", "communication", 1, False),
    ("communication_internet", EXPENSE, "インターネット", "communication", 2, False),
    ("utilities", EXPENSE, "水道光熱費", None, 5, False),
    ("utilities_electricity", EXPENSE, "電気", "utilities", 1, False),
    ("utilities_gas", EXPENSE, "ガス", "utilities", 2, False),
    ("utilities_water", EXPENSE, "水道", "utilities", 3, False),
    ("housing", EXPENSE, "住居費", None, 6, False),
    ("housing_rent", EXPENSE, "家賃", "housing", 1, False),
    ("other_expense", EXPENSE, "その他支出", None, 99, True),
    # Transfer
    ("transfer_between_accounts", TRANSFER, "口座間振替", None, 1, False),
    ("transfer_other", TRANSFER, "その他振替", None, 99, True),
    # Repayment
    ("repayment_card", REPAYMENT, "カード返済", None, 1, False),
    ("repayment_loan", REPAYMENT, "ローン返済", None, 2, False),
    ("repayment_other", REPAYMENT, "その他返済", None, 99, True),
    # Investment
    ("investment_stocks", INVESTMENT, "株式", None, 1, False),
    ("investment_funds", INVESTMENT, "投資信託", None, 2, False),
    ("investment_other", INVESTMENT, "その他投資", None, 99, True),
]

# (id, name, aliases, default subcategory id, confidence)
INITIAL_MERCHANTS = [
    ("merchant_supermarket_aeon", "イオン", ("AEON", "イオンモール"), "food_groceries", 0.95),
    ("merchant_supermarket_life", "ライフ", ("LIFE",), "food_groceries", 0.95),
    ("merchant_supermarket_seiyu", "西友", ("SEIYU", "セイユー"), "food_groceries", 0.95),
    ("merchant_cafe_starbucks", "スターバックス", ("Starbucks", "スタバ"), "food_cafe", 0.95),
    ("merchant_cafe_doutor", "ドトール", ("DOUTOR", "ドトールコーヒー"), "food_cafe", 0.95),
    ("merchant_cafe_tullys", "タリーズ", ("TULLY'S", "タリーズコーヒー"), "food_cafe", 0.95),
    ("merchant_restaurant_mcdonalds", "マクドナルド", ("McDonald's", "マック"), "food_dining_out", 0.95),
    ("merchant_restaurant_yoshinoya", "吉野家", ("YOSHINOYA",), "food_dining_out", 0.95),
    ("merchant_restaurant_sukiya", "すき家", ("SUKIYA", "スキヤ"), "food_dining_out", 0.95),
    ("merchant_drugstore_matsukiyo", "マツモトキヨシ", ("マツキヨ", "MATSUKIYO"), "daily_supplies", 0.95),
    ("merchant_drugstore_cocokara", "ココカラファイン", ("ココカラ", "COCOKARA"), "daily_supplies", 0.95),
    ("merchant_fashion_uniqlo", "ユニクロ", ("UNIQLO",), "daily_clothes", 0.95),
    ("merchant_fashion_gu", "ジーユー", ("GU", "G.U."), "daily_clothes", 0.95),
    ("merchant_transport_jr", "JR東日本", ("JR", "JR East", "ジェイアール"), "transport_train_bus", 0.95),
    ("merchant_transport_metro", "東京メトロ", ("TOKYO METRO", "メトロ"), "transport_train_bus", 0.95),
    ("merchant_ic_suica", "Suica", ("スイカ",), "transport_train_bus", 0.9),
    ("merchant_ic_pasmo", "PASMO", ("パスモ",), "transport_train_bus", 0.9),
    ("merchant_mobile_docomo", "NTTドコモ", ("docomo", "ドコモ"), "communication_mobile", 0.95),
    ("merchant_mobile_au", "au", ("エーユー", "KDDI"), "communication_mobile", 0.95),
    ("merchant_mobile_softbank", "ソフトバンク", ("SoftBank",), "communication_mobile", 0.95),
    ("merchant_utility_tepco", "東京電力", ("TEPCO",), "utilities_electricity", 0.95),
    ("merchant_utility_tokyo_gas", "東京ガス", ("TOKYO GAS",), "utilities_gas", 0.95),
]


def initial_subcategories() -> list[Subcategory]:
    """Build the seed subcategories."""
    return [
        Subcategory(
            id=sub_id,
            category_type=category_type,
            name=name,
            parent_id=parent_id,
            display_order=order,
            is_default=is_default,
        )
        for sub_id, category_type, name, parent_id, order, is_default in INITIAL_SUBCATEGORIES
    ]


def initial_merchants() -> list[Merchant]:
    """Build the seed merchant directory."""
    return [
        Merchant(
            id=merchant_id,
            name=name,
            aliases=aliases,
            default_subcategory_id=subcategory_id,
            confidence=confidence,
        )
        for merchant_id, name, aliases, subcategory_id, confidence in INITIAL_MERCHANTS
    ]


@click.command("init-master")
@click.option("--force", is_flag=True, help="Overwrite existing master data")
@click.pass_context
def init_master(ctx, force: bool):
    """Initialize database with default subcategories and merchants."""
    db = ctx.obj["db"]
    service = MasterDataService(db)

    if service.has_master_data() and not force:
        click.echo("Master data already exists. Use --force to overwrite.")
        return

    click.echo("Creating subcategories and merchant directory...")
    try:
        subs, merchants = service.seed(initial_subcategories(), initial_merchants())
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Successfully created {subs} subcategories and {merchants} merchants.")


def register_commands(cli):
    """Register init-master command with main CLI."""
    cli.add_command(init_master)
