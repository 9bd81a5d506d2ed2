from clarityai.prefilter import extract_public_functions, malicious_contract_report, pre_analyze_contract


def test_flags_repeated_swaps_with_external_calls(malicious_source):
    verdict = pre_analyze_contract(malicious_source)

    assert verdict.is_potentially_malicious is True
    assert verdict.repetitive_patterns is True
    assert verdict.repetitive_ops == 7
    assert verdict.suspicious_contracts == ("SP000000000000000000002Q6VF78.pool",)


def test_five_swaps_is_not_repetitive():
    source = " ".join(f"swap-{n}" for n in range(5)) + " (contract-call? 'SP1.token transfer)"
    verdict = pre_analyze_contract(source)

    assert verdict.repetitive_patterns is False
    assert verdict.repetitive_ops == 0
    assert verdict.suspicious_contracts == ("SP1.token",)
    assert verdict.is_potentially_malicious is False


def test_repetition_without_external_calls_is_not_malicious():
    source = " ".join(f"swap-{n}" for n in range(10))
    verdict = pre_analyze_contract(source)

    assert verdict.repetitive_patterns is True
    assert verdict.suspicious_contracts == ()
    assert verdict.is_potentially_malicious is False


def test_contract_targets_are_deduplicated_in_order():
    source = (
        "(contract-call? 'SP2.b f) (contract-call?   'SP1.a g) (contract-call? 'SP2.b h)"
    )
    assert pre_analyze_contract(source).suspicious_contracts == ("SP2.b", "SP1.a")


def test_report_is_high_risk(malicious_source):
    report = malicious_contract_report(malicious_source, pre_analyze_contract(malicious_source))

    assert report["riskLevel"] == "HIGH"
    assert report["securityScore"] == "10"
    assert report["functions"] == ["drain"]
    issues = report["security"]["issues"]
    assert "7 occurrences" in issues[0]["description"]
    assert "SP000000000000000000002Q6VF78.pool" in issues[1]["description"]


def test_public_function_names():
    source = "(define-public (transfer (amount uint)) (ok true))\n(define-read-only (get-x) u1)\n(define-public  (mint) (ok u1))"
    assert extract_public_functions(source) == ["transfer", "mint"]
