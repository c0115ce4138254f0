"""Diagnostics, marker lines and the run/execute entry points."""

import logging
import sys

import pytest

from manifast import (ASSERTION_FAILURE_MARKER, RUNTIME_ERROR_MARKER, STACK_OVERFLOW_MESSAGE, ErrorHandler,
                      ExecutionResult, Status, execute, run)


def passed(output):
    return RUNTIME_ERROR_MARKER not in output and ASSERTION_FAILURE_MARKER not in output


def test_assertion_failure_marker():
    output = execute('println("sebelum")\nassert(salah, "pesan")\nprintln("sesudah")')
    assert output == "sebelum\n[ASSERT GAGAL] Assertion Failed: pesan\n"
    assert RUNTIME_ERROR_MARKER not in output


def test_marker_starts_on_a_fresh_line():
    assert execute('print("x") assert(1 == 2, "beda")') == "x\n[ASSERT GAGAL] Assertion Failed: beda\n"


def test_assertion_without_message():
    assert execute("assert(salah)") == "[ASSERT GAGAL] Assertion Failed\n"
    assert execute("assert(nil, 42)") == "[ASSERT GAGAL] Assertion Failed: 42\n"


def test_passing_assertion_prints_nothing():
    assert execute('assert(benar, "ok")\nprintln("lanjut")') == "lanjut\n"


def test_assert_needs_an_argument():
    output = execute("assert()")
    assert RUNTIME_ERROR_MARKER in output
    assert ASSERTION_FAILURE_MARKER not in output


def test_runtime_error_line():
    assert execute("lokal a = [1]\nprintln(a[5])") == "[ERROR RUNTIME] Baris 2:10: Indeks 5 di luar jangkauan (1..1)\n"


def test_error_halts_execution():
    output = execute('println("a")\nprintln(1 / 0)\nprintln("b")')
    assert output == "a\n[ERROR RUNTIME] Baris 2:11: Pembagian dengan nol\n"


def test_error_inside_native_gets_call_position():
    output = execute('lokal s = impor("string")\ns.substring("abc", 3, 1)')
    assert output.startswith("[ERROR RUNTIME] Baris 2:12: ")


def test_syntax_errors_use_the_runtime_marker():
    output = execute('println("a"')
    assert output.startswith("[ERROR RUNTIME] [SINTAKS] Baris 1:")
    assert output.count("\n") == 1
    output = execute("lokal x = @")
    assert "[SINTAKS]" in output
    assert "Karakter tidak dikenal" in output


def test_syntax_error_runs_nothing():
    assert not execute('println("a")\nlokal = 1').startswith("a")


def test_structured_result():
    result = run('println("x") assert(salah, "m")')
    assert result.status is Status.ASSERTION_FAILURE
    assert result.message == "m"
    assert result.output == "x\n"
    assert not result.ok
    assert result.text == "x\n[ASSERT GAGAL] Assertion Failed: m\n"


def test_printed_marker_text_does_not_fail_structured_result():
    result = run('println("[ERROR RUNTIME] palsu")')
    assert result.status is Status.OK
    assert result.ok
    assert result.message is None


def test_runs_are_isolated():
    assert execute("x = 1") == ""
    assert RUNTIME_ERROR_MARKER in execute("println(x)")


def test_recursion_limit_is_restored():
    before = sys.getrecursionlimit()
    output = execute("fungsi f() f() tutup\nf()")
    assert STACK_OVERFLOW_MESSAGE in output
    assert sys.getrecursionlimit() == before


def test_error_handler_maps_internal_errors(caplog):
    result = ExecutionResult()
    with ErrorHandler(result):
        raise KeyError("x")
    assert result.status is Status.RUNTIME_ERROR
    assert result.message.startswith("[internal] KeyError")
    assert "internal error" in caplog.text


def test_error_handler_maps_recursion_error():
    result = ExecutionResult()
    with ErrorHandler(result):
        raise RecursionError()
    assert result.message == STACK_OVERFLOW_MESSAGE


def test_error_handler_lets_interrupts_through():
    with pytest.raises(KeyboardInterrupt):
        with ErrorHandler(ExecutionResult()):
            raise KeyboardInterrupt()


def test_debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="manifast")
    run('impor("math")')
    assert "loaded module math" in caplog.text
    assert "run finished: OK" in caplog.text


SHOWCASE = """--assert(bukan salah, "bukan salah error "+ bukan salah)
println("Assertion Testing", println);
println("Assert passed.");

println("--- Type Testing (angka) ---")
println("Type of 123: " + tipe(123))

println("\\n--- String Concatenation ---")
println("Halo " + "Dunia")
println("Umur: " + 25)

println("\\n--- Standard Library Testing ---")
lokal os = impor("os")
println("Waktu OS: " + os.waktuNano())

lokal str = impor("string")
lokal parts = str.split("Manifast,Luar,Biasa", ",")

println("Split result 1: ", parts)
println("Split result 2: " + parts[2])
println("Split result 3: " + parts[3])

print("tipe parts ", tipe(parts))

println("\\nSubstring 1-8: " + impor("string").substring("Manifast,Luar,Biasa", 1, 8))

println("\\n--- OOP Testing ---")
kelas Orang maka
    fungsi inisiasi(nama, umur)
        self.nama = nama
        self.umur = umur
    tutup

    fungsi bicara()
        println("Halo, nama saya " + self.nama)
    tutup
tutup

lokal budi = Orang("Budi", 25)
budi.bicara()

println("Tipe budi: " + tipe(budi), budi, Orang)

-- Slicing test
lokal data = [10, 20, 30, 40, 50]
lokal sub = data[2:4]
println("Slice data[2:4]: " + tipe(sub), sub)
println("sub[1]: " + sub[1])
println("sub[2]: " + sub[2])
println("sub[3]: " + sub[3])

println("\\n--- Recursion Testing ---")
fungsi fib(n)
  jika n < 2 maka
    kembali n
  tutup
  kembali fib(n-1) + fib(n-2)
tutup
lokal start = os.waktuNano()
print("fib(10) =", fib(21))
lokal end = os.waktuNano()
println("\\nDone!", 5%2)
println("Time taken for fib recursive: " + (end - start)/1000 + "ms", start, end)
"""


def test_showcase_script():
    output = execute(SHOWCASE)
    assert passed(output), output
    for expected in [
        "Assertion Testing\t[Fungsi Native]\n",
        "Type of 123: angka\n",
        "Umur: 25\n",
        "Split result 1: \t[Manifast, Luar, Biasa]\n",
        "Split result 3: Biasa\n",
        "tipe parts \tlarik\n",
        "Substring 1-8: Manifast\n",
        "Halo, nama saya Budi\n",
        "Tipe budi: Orang\t[Instance of Orang]\t[Kelas Orang]\n",
        "Slice data[2:4]: larik\t[20, 30, 40]\n",
        "sub[3]: 40\n",
        "fib(10) =\t10946\n",
        "Done!\t1\n",
    ]:
        assert expected in output
