"""
Scan Services

Organized by pipeline stage:

1. navigation/ - Browser sessions
   - page_navigator.py: Selenium Chrome wrapper, wait conditions, link extraction

2. discovery/ - URL enumeration
   - page_discovery.py: Breadth-first same-origin crawl bounded by max_pages / max_depth

3. audit/ - Accessibility engine
   - axe_runner.py: Inject axe-core and run the WCAG A/AA rule set

4. scan/ - Per-URL driver
   - scan.py: One fresh session per URL, sequential or a small worker pool

5. utils/ - Pure helpers
   - aggregator.py: Site totals, top recurring rules, per-page counts

6. reporting/ - Artifacts
   - report_renderer.py: Jinja2 HTML report
   - artifact_writer.py: report.json + report.html under REPORTS_DIR/<report_id>/

7. orchestration/ - Job coordination
   - site_scan.py: crawl -> scan -> aggregate -> persist
"""
