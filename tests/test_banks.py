import pytest
from faktor.detect.banks import BankMatch, BankTable, detect_bank, load_bank_table


@pytest.fixture
def table():
    return load_bank_table()


def test_packaged_table_loads(table):
    assert "6037" in table.bins
    assert len(table.candidates("6037")) == 3


def test_single_candidate_prefix(table):
    match = table.detect("6104-3377-1234-5678")
    assert match == BankMatch(bank="ملت", logo="/images/bank-mellat.png")


@pytest.mark.parametrize(
    "card, bank",
    [
        ("6037-6912-3456-7890", "صادرات ایران"),
        ("6037-7015-4909-9163", "کشاورزی"),
        ("6037 9972 1100 8801", "ملی ایران"),
        ("6274-8812-3456-7890", "کارآفرین"),
        ("6274-1212-3456-7890", "اقتصاد نوین"),
    ],
)
def test_shared_prefix_uses_six_digits(table, card, bank):
    assert table.detect(card).bank == bank


def test_shared_prefix_without_example_match_falls_back_to_first(table):
    assert table.detect("6037-0012-3456-7890").bank == "صادرات ایران"


def test_first_candidate_wins_identical_examples(table):
    # Both Pasargad and Sina list 6393-46; table order decides.
    assert table.detect("6393-4612-3456-7890").bank == "پاسارگاد"
    assert table.detect("6393-4712-3456-7890").bank == "پاسارگاد"


def test_logo_borrowed_from_parent_bank(table):
    match = table.detect("5058-0112-3456-7890")
    assert match.bank == "مؤسسه اعتباری کوثر (سپه)"
    assert match.logo == "/images/bank-sepah.png"


def test_bank_without_logo(table):
    match = table.detect("6274-1212-3456-7890")
    assert match.logo is None


@pytest.mark.parametrize("card", ["", None, "603", "60-3", "1111-2222-3333-4444", "abcd1234"])
def test_misses_are_none(table, card):
    assert table.detect(card) is None


def test_four_digits_are_enough(table):
    assert table.detect("6219").bank == "سامان"


def test_detect_bank_uses_packaged_table_by_default():
    assert detect_bank("6219861234567890").bank == "سامان"


def test_custom_table_from_yaml(tmp_path):
    path = tmp_path / "bins.yaml"
    path.write_text(
        "logos:\n"
        "  Alpha: /a.png\n"
        "bins:\n"
        "  '1234':\n"
        "    - {bank: Alpha, prefix_examples: ['1234-11']}\n"
        "    - {bank: Beta, prefix_examples: ['1234-22'], logo: /b.png}\n"
        "  '9999': []\n",
        encoding="utf-8",
    )
    table = BankTable.from_path(path)
    assert table.detect("1234 2200 0000 0000") == BankMatch(bank="Beta", logo="/b.png")
    assert table.detect("1234 1100 0000 0000") == BankMatch(bank="Alpha", logo="/a.png")
    assert table.detect("9999 0000 0000 0000") is None
    assert detect_bank("1234220000000000", table).bank == "Beta"
