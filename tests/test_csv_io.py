import sys
import os
import io
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from client_account import ClientAccount
from csv_io import format_decimal, read_transactions, write_accounts
from errors import InputError
from models import ClientId, Transaction, TransactionId, TransactionType


def write_csv(tmp_path, *lines):
    csv_file = tmp_path / "test.csv"
    csv_file.write_text("\n".join(lines))
    return str(csv_file)


class TestReadTransactions:
    def test_reads_all_types_with_whitespace(self, tmp_path):
        path = write_csv(
            tmp_path,
            "type, client, tx, amount",
            "deposit, 1, 1, 1.0",
            "Withdrawal,  1, 2,  0.5 ",
            "dispute, 1, 1,",
            "RESOLVE, 1, 1,",
            "chargeback, 1, 1",
        )

        transactions = list(read_transactions(path))

        assert transactions == [
            Transaction.deposit(ClientId(1), TransactionId(1), Decimal("1.0")),
            Transaction.withdrawal(ClientId(1), TransactionId(2), Decimal("0.5")),
            Transaction.dispute(ClientId(1), TransactionId(1)),
            Transaction.resolve(ClientId(1), TransactionId(1)),
            Transaction.chargeback(ClientId(1), TransactionId(1)),
        ]

    def test_amount_column_optional_without_amount_rows(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx", "dispute,2,7")
        transactions = list(read_transactions(path))
        assert transactions[0].transaction_type == TransactionType.DISPUTE
        assert transactions[0].client_id == ClientId(2)

    def test_amount_on_dispute_is_ignored(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx,amount", "dispute,1,1,5.0")
        assert list(read_transactions(path))[0].amount is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputError, match="cannot open"):
            list(read_transactions(str(tmp_path / "missing.csv")))

    def test_empty_file(self, tmp_path):
        path = write_csv(tmp_path, "")
        with pytest.raises(InputError, match="empty"):
            list(read_transactions(path))

    def test_missing_header_column(self, tmp_path):
        path = write_csv(tmp_path, "type,client,amount", "deposit,1,1.0")
        with pytest.raises(InputError, match="tx"):
            list(read_transactions(path))

    @pytest.mark.parametrize(
        "row",
        [
            "transfer, 1, 1, 1.0",
            "deposit, abc, 1, 1.0",
            "deposit, -1, 1, 1.0",
            "deposit, 65536, 1, 1.0",
            "deposit, 1, 4294967296, 1.0",
            "deposit, 1, 1,",
            "withdrawal, 1, 1",
            "deposit, 1, 1, 1e3",
            "deposit, 1, 1, NaN",
            "deposit, 1, 1, inf",
            "deposit, 1, 1, -5.0",
            "deposit, 1, 1, 1.23456",
            "deposit, 1, 1, 1.0, extra",
            "deposit, 1, 1, 12345678901234567890123456789.1234",
        ],
    )
    def test_malformed_rows_are_fatal(self, tmp_path, row):
        path = write_csv(tmp_path, "type, client, tx, amount", "deposit, 1, 1, 1.0", row)
        with pytest.raises(InputError) as exc_info:
            list(read_transactions(path))
        assert exc_info.value.line_number == 3
        assert str(exc_info.value).startswith("line 3:")

    def test_amount_scale_is_configurable(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx,amount", "deposit,1,1,1.123456")
        transactions = list(read_transactions(path, amount_scale=6))
        assert transactions[0].amount == Decimal("1.123456")

    def test_id_upper_bounds_accepted(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx,amount", "deposit,65535,4294967295,1")
        transaction = list(read_transactions(path))[0]
        assert transaction.client_id == ClientId(65535)
        assert transaction.transaction_id == TransactionId(4294967295)

    def test_largest_exact_amount_accepted(self, tmp_path):
        path = write_csv(tmp_path, "type,client,tx,amount", "deposit,1,1,123456789012345678901234.5678")
        transaction = list(read_transactions(path))[0]
        assert transaction.amount == Decimal("123456789012345678901234.5678")


class TestFormatDecimal:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1.5000", "1.5"),
            ("100", "100"),
            ("100.00", "100"),
            ("0.0001", "0.0001"),
            ("-4", "-4"),
            ("0.000", "0"),
            ("-0", "0"),
            ("1E+3", "1000"),
            ("12345678901234567890.1234", "12345678901234567890.1234"),
        ],
    )
    def test_format(self, value, expected):
        assert format_decimal(Decimal(value)) == expected


class TestWriteAccounts:
    def test_writes_header_and_rows_in_given_order(self):
        second = ClientAccount(ClientId(2))
        second.apply(Transaction.deposit(ClientId(2), TransactionId(1), Decimal("2.50")))
        first = ClientAccount(ClientId(1))
        first.apply(Transaction.deposit(ClientId(1), TransactionId(2), Decimal("10")))
        first.apply(Transaction.dispute(ClientId(1), TransactionId(2)))
        first.apply(Transaction.chargeback(ClientId(1), TransactionId(2)))

        stream = io.StringIO()
        write_accounts([second, first], stream)

        assert stream.getvalue() == (
            "client,available,held,total,locked\n"
            "2,2.5,0,2.5,false\n"
            "1,0,0,0,true\n"
        )

    def test_no_accounts_writes_header_only(self):
        stream = io.StringIO()
        write_accounts([], stream)
        assert stream.getvalue() == "client,available,held,total,locked\n"
