"""Console summary of the fee comparison."""

from .types import ProbeResult

RULE = "═" * 60


def fee_verdict(standard: ProbeResult, compressed: ProbeResult) -> str:
    if standard.fee == compressed.fee:
        return f"Both transfers cost exactly {standard.fee} lamports"
    return f"Different fees: {standard.fee} vs {compressed.fee} lamports"


def print_report(standard: ProbeResult, compressed: ProbeResult) -> None:
    """Print both probe results and what the comparison means."""
    print()
    print(RULE)
    print("📊 FINAL RESULTS")
    print(RULE)

    for marker, result in (("🔵", standard), ("🟢", compressed)):
        print(f"\n{marker} {result.label}:")
        print(f"   Fee: {result.fee} lamports ({result.fee_sol} SOL)")
        print(f"   TX: {result.explorer_url}")

    print("\n💡 KEY FINDINGS:")
    marker = "✅" if standard.fee == compressed.fee else "⚠️ "
    print(f"   {marker} {fee_verdict(standard, compressed)}")
    print("   Note: the compressed fee covers the final transfer only,")
    print("   not the wrap and compress setup transactions.")

    print('\n📖 WHAT "98% CHEAPER" REALLY MEANS:')
    print("   Transaction fees: SAME (5,000 lamports)")
    print("   Account creation: SAVE ~2M lamports per account")
    print("   State storage: SAVE ongoing rent costs")
    print("   Best for: Airdrops, mass distributions, millions of users")
    print("   Not for: Individual 1-on-1 transfers")

    print("\n✅ Experiment complete!")
