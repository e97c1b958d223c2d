from mail_notifier.services.forward_parser import ForwardHeaders, extract_forward_headers

GMAIL_TEXT_FORWARD = (
    "---------- Forwarded message ---------\n"
    "From: BCA <bca@bca.co.id>\n"
    "Date: Mon, 1 Jan 2024 at 10:00\n"
    "Subject: Credit Card Transaction Notification\n"
    "To: <me@example.com>\n"
    "\n"
    "Nomor Customer : 12345678\n"
)

GMAIL_HTML_FORWARD = (
    '<div dir="ltr"><div class="gmail_quote"><div dir="ltr" class="gmail_attr">'
    "---------- Forwarded message ---------<br>"
    'From: <strong class="gmail_sendername" dir="auto">BCA</strong> '
    '<span dir="auto">&lt;<a href="mailto:bca@bca.co.id">bca@bca.co.id</a>&gt;</span><br>'
    "Date: Mon, 1 Jan 2024 at 10:00<br>"
    "Subject: Credit Card Transaction Notification<br>"
    "To: &lt;<a href=\"mailto:me@example.com\">me@example.com</a>&gt;<br></div></div></div>"
)


def test_empty_input_has_no_headers() -> None:
    for content in ("", None):
        headers = extract_forward_headers(content)
        assert headers == ForwardHeaders()
        assert headers.as_dict() == {}
        assert not headers.found


def test_dari_with_encoded_address() -> None:
    headers = extract_forward_headers("Dari: Jane Doe &lt;jane@example.com&gt;<br>")
    assert headers.from_ == "Jane Doe <jane@example.com>"


def test_subject_only() -> None:
    headers = extract_forward_headers("Subject: Re: Payment<br>")

    assert headers.subject == "Re: Payment"
    assert headers.from_ is None
    assert headers.date is None
    assert headers.as_dict() == {"subject": "Re: Payment"}


def test_plain_text_forward_keeps_bracketed_address() -> None:
    headers = extract_forward_headers(GMAIL_TEXT_FORWARD)

    assert headers.as_dict() == {
        "from": "BCA <bca@bca.co.id>",
        "date": "Mon, 1 Jan 2024 at 10:00",
        "subject": "Credit Card Transaction Notification",
    }


def test_html_forward_strips_inline_tags() -> None:
    headers = extract_forward_headers(GMAIL_HTML_FORWARD)

    assert headers.from_ == "BCA <bca@bca.co.id>"
    assert headers.date == "Mon, 1 Jan 2024 at 10:00"
    assert headers.subject == "Credit Card Transaction Notification"


def test_indonesian_and_outlook_triggers() -> None:
    assert extract_forward_headers("Tanggal: 1 Januari 2024<br/>").date == "1 Januari 2024"
    assert extract_forward_headers("Sent: Monday, 1 January 2024 10:00\r\nTo: me").date == (
        "Monday, 1 January 2024 10:00"
    )
    assert extract_forward_headers("<b>From:</b> Jane<br />").from_ == "Jane"


def test_closing_div_ends_value() -> None:
    headers = extract_forward_headers("<div>From: Jane</div><div>Subject: Hi</div>")

    assert headers.from_ == "Jane"
    assert headers.subject == "Hi"


def test_value_may_run_to_end_of_input() -> None:
    assert extract_forward_headers("Subject: Last line").subject == "Last line"


def test_trigger_must_not_be_part_of_another_word() -> None:
    headers = extract_forward_headers("Reply-From: someone\nUpdate: later\n")

    assert headers.from_ is None
    assert headers.date is None


def test_empty_value_is_absent() -> None:
    headers = extract_forward_headers("Subject:\nFrom: Jane\n")

    assert headers.subject is None
    assert headers.from_ == "Jane"


def test_nbsp_is_decoded_and_trimmed() -> None:
    assert extract_forward_headers("Date:&nbsp;Mon, 1 Jan 2024&nbsp;<br>").date == "Mon, 1 Jan 2024"


def test_case_insensitive_triggers() -> None:
    headers = extract_forward_headers("FROM: Jane\nsubject: hello\nDATE: today\n")
    assert headers.as_dict() == {"from": "Jane", "subject": "hello", "date": "today"}


def test_unbalanced_markup_does_not_raise() -> None:
    headers = extract_forward_headers("<div><span>From: <b>Jane<br><<<")
    assert headers.from_ == "Jane"


def test_extracted_values_do_not_retrigger() -> None:
    headers = extract_forward_headers(GMAIL_HTML_FORWARD)
    values = "\n".join(headers.as_dict().values())

    assert "<br" not in values and "<span" not in values
    assert extract_forward_headers(values) == ForwardHeaders()
