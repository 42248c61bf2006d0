"""CLI report — prints levels, pattern stats and signals to the console."""

from openrange.pipeline import AnalysisResult


def format_report(result: AnalysisResult) -> str:
    """Format an analysis result as a plain-text report.

    Returns:
        The formatted string (not printed).
    """
    session = result.session_date.isoformat() if result.session_date else "-"
    lines = [
        "──────────────── OpenRange Report ────────────────",
        f"  Timezone:        {result.timezone}",
        f"  Latest session:  {session}",
    ]

    if result.levels is None:
        lines.append("  Levels:          N/A (no usable opening bar)")
    else:
        lv = result.levels
        lines.append(
            f"  Opening bar:     A={lv.opening_high:.2f}  B={lv.opening_low:.2f}"
            f"  R={lv.range:.2f}"
        )
        lines.append("")
        lines.append("  Level      Price")
        for key, price in lv.as_dict().items():
            lines.append(f"  {key:<6} {price:>9.2f}")

    lines.append("")
    lines.append("  Level  Touches  Bounces  Breaks  Bounce %")
    for r in result.stats.rows:
        lines.append(
            f"  {r.key:<6} {r.touches:>7}  {r.bounces:>7}  {r.breaks:>6}"
            f"  {r.bounce_rate * 100:>7.0f}%"
        )

    lines.append("")
    if result.signals:
        lines.append("  Signals:")
        for s in result.signals:
            lines.append(
                f"  {s.type.upper():<4} {s.reason}  |  Entry {s.entry:.2f}"
                f"  SL {s.stop_loss:.2f}  TP {s.take_profit:.2f}"
            )
    else:
        lines.append("  Signals:         none")
    lines.append("──────────────────────────────────────────────────")
    return "\n".join(lines)


def print_report(result: AnalysisResult) -> str:
    """Format and print *result*; returns the printed text."""
    output = format_report(result)
    print(output)
    return output
