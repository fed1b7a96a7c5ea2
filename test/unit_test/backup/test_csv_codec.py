import pytest

from fauxdash.backup import (
    CategoryRow,
    ItemRow,
    escape_csv,
    exportable_icon,
    generate_categories_csv,
    generate_items_csv,
    parse_categories_csv,
    parse_csv_line,
    parse_items_csv,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ""),
        ("plain", "plain"),
        (3, "3"),
        ("a,b", '"a,b"'),
        ('say "hi"', '"say ""hi"""'),
        ("two\nlines", '"two\nlines"'),
    ],
)
def test_escape_csv(value, expected):
    assert escape_csv(value) == expected


@pytest.mark.parametrize(
    "line, expected",
    [
        ("a,b,c", ["a", "b", "c"]),
        (" a , b ,", ["a", "b", ""]),
        ('"a,b",c', ["a,b", "c"]),
        ('"say ""hi""",x', ['say "hi"', "x"]),
        ("", [""]),
    ],
)
def test_parse_csv_line(line, expected):
    assert parse_csv_line(line) == expected


@pytest.mark.parametrize(
    "icon, expected",
    [
        (None, ""),
        ("mdi:home", "mdi:home"),
        ("selfhst:plex", "selfhst:plex"),
        ("favicon:/api/v1/favicons/serve/x.png", ""),
        ("/api/v1/favicons/serve/x.png", ""),
    ],
)
def test_exportable_icon(icon, expected):
    assert exportable_icon(icon) == expected


def test_generate_items_csv():
    content = generate_items_csv(
        [
            ItemRow(name="Tube, the video site", url="https://tube.mock", category_name="Media", icon="favicon:x"),
            ItemRow(name="NAS", url="http://nas", description="Storage", icon="mdi:nas", order=2, is_visible=False, requires_auth=True),
        ]
    )

    assert content.split("\n") == [
        "Name,Description,URL,Icon,Category,Order,Visible,RequiresAuth",
        '"Tube, the video site",,https://tube.mock,,Media,0,true,false',
        "NAS,Storage,http://nas,mdi:nas,Uncategorized,2,false,true",
    ]


def test_parse_items_csv_skips_comments_and_short_lines():
    content = "\r\n".join(
        [
            "# exported by hand",
            "Name,Description,URL,Icon,Category,Order,Visible,RequiresAuth",
            '"Tube, the video site",,https://tube.mock,,Media,3,FALSE,TRUE',
            "too,short",
            "",
            "Mail,,https://mail.mock,mdi:mail,,abc",
        ]
    )

    rows = parse_items_csv(content)

    assert rows == [
        ItemRow(name="Tube, the video site", url="https://tube.mock", category_name="Media", order=3, is_visible=False, requires_auth=True),
        ItemRow(name="Mail", url="https://mail.mock", icon="mdi:mail", category_name="Uncategorized", order=0),
    ]


def test_categories_round_trip_through_text():
    rows = [
        CategoryRow(name="Media", order=1),
        CategoryRow(name="Daily, work", icon="mdi:sun", color="#ff0000", order=3, is_collapsed=True, show_open_all=True),
    ]

    content = generate_categories_csv(rows)

    assert content.split("\n")[1] == "Media,,,1,false,false"
    assert parse_categories_csv(content) == rows


def test_parse_categories_skips_nameless_rows():
    assert parse_categories_csv("Name,Icon\n,mdi:x\nKeep") == [CategoryRow(name="Keep")]
