"""
Built-in content: the case-study catalog and the starter quote document.

License: MIT
"""

from typing import Dict, Iterable, List as ListType

from quotesmith.models import CaseStudyRef


CASE_STUDIES: ListType[CaseStudyRef] = [
    CaseStudyRef(
        id="dynamic-promotions",
        title="Dynamic Promotions in NetSuite SuiteCommerce",
        summary="Turning manual promotion pages into dynamic, automated experiences",
        link="https://brokenrubik.com/case-studies/dynamic-promotions-in-netsuite-suitecommerce",
        category="SuiteCommerce",
    ),
    CaseStudyRef(
        id="shopify-netsuite",
        title="Shopify Ordering, NetSuite Processing",
        summary="Unified NetSuite and Shopify integration for seamless order flow",
        link="https://brokenrubik.com/case-studies/shopify-netsuite",
        category="Integration",
    ),
    CaseStudyRef(
        id="performance-overhaul",
        title="Performance Overhaul for SuiteCommerce",
        summary="Boosting speed and conversions with targeted technical optimization",
        link="https://brokenrubik.com/case-studies/performance-overhaul-for-icrealtime-suitecommerce-store",
        category="Performance",
    ),
    CaseStudyRef(
        id="suitecommerce-to-shopify",
        title="From SuiteCommerce to Shopify",
        summary="Rebuilding eCommerce for speed, search, and scalability",
        link="https://brokenrubik.com/case-studies/from-suitecommerce-to-shopify",
        category="Migration",
    ),
    CaseStudyRef(
        id="netsuite-deposco",
        title="NetSuite-Deposco Warehouse Integration",
        summary="Seamless NetSuite-WMS sync for accurate warehouse operations",
        link="https://brokenrubik.com/case-studies/netsuite-deposco-integration",
        category="Integration",
    ),
    CaseStudyRef(
        id="klim-b2b",
        title="KLIM Collaborative B2B Order Manager",
        summary="From Excel spreadsheets to a seamless digital ordering tool",
        link="https://brokenrubik.com/case-studies/klim-preseason",
        category="B2B",
    ),
    CaseStudyRef(
        id="kenwood-draft-orders",
        title="Kenwood: Draft Orders in SuiteCommerce",
        summary="Enable multiple in-progress B2B orders without cart limitations",
        link="https://brokenrubik.com/case-studies/draft-orders-in-suitecommerce",
        category="B2B",
    ),
    CaseStudyRef(
        id="inventory-sync",
        title="Inventory Sync: NetSuite & Adobe Commerce",
        summary="Making inventory synchronization fast and reliable",
        link="https://brokenrubik.com/case-studies/inventory-synchronization-between-netsuite-and-adobe-commerce",
        category="Integration",
    ),
    CaseStudyRef(
        id="hubspot-netsuite",
        title="Bridging HubSpot and NetSuite with Celigo",
        summary="Automating Sales Order Synchronization across platforms",
        link="https://brokenrubik.com/case-studies/hubspot-netsuite-celigo-automate-sales-orders",
        category="Integration",
    ),
    CaseStudyRef(
        id="inventory-dashboard",
        title="Designer Wellness: Inventory Dashboard",
        summary="Smart inventory view in NetSuite for Amazon fulfillment",
        link="https://brokenrubik.com/case-studies/netsuite-inventory-management-amazon",
        category="NetSuite",
    ),
    CaseStudyRef(
        id="landed-cost",
        title="WeLink: Landed Cost Automation",
        summary="Enhancing cost visibility in multi-step purchase flows",
        link="https://brokenrubik.com/case-studies/welink-landed-cost-automation-for-supply-chain-accuracy",
        category="NetSuite",
    ),
    CaseStudyRef(
        id="stinger-redesign",
        title="Stinger: UX/UI Redesign",
        summary="UX/UI modernization to implement branding",
        link="https://brokenrubik.com/case-studies/stinger-redesign",
        category="Design",
    ),
    CaseStudyRef(
        id="variant-navigation",
        title="Smarter Product Variant Navigation",
        summary="Simplifying Product Variant Navigation with Custom Structures",
        link="https://brokenrubik.com/case-studies/smarter-product-variant-navigation-on-suitecommerce",
        category="SuiteCommerce",
    ),
    CaseStudyRef(
        id="klaviyo",
        title="Klaviyo Integration",
        summary="Seamless Transaction Sync: NetSuite with Klaviyo",
        link="https://brokenrubik.com/case-studies/klaviyo-integration",
        category="Integration",
    ),
    CaseStudyRef(
        id="blog-suitecommerce",
        title="Blog Posting Made Easy for SuiteCommerce",
        summary="An exclusive product by BrokenRubik",
        link="https://brokenrubik.com/case-studies/blog-posting-made-easy-for-suitecommerce",
        category="SuiteCommerce",
    ),
    CaseStudyRef(
        id="deckmatch",
        title="Deckmatch",
        summary="Simplifying Deck Plug and Screw Selection for DIY Customers",
        link="https://brokenrubik.com/case-studies/deckmatch",
        category="Product",
    ),
    CaseStudyRef(
        id="prescription",
        title="Prescription Management and Patient Care",
        summary="A UX case study with Oborne Health Supplies",
        link="https://brokenrubik.com/case-studies/prescription-management",
        category="UX",
    ),
    CaseStudyRef(
        id="godatafeed",
        title="Streamlining Sales and Order Management",
        summary="Integration connecting GoDataFeed and NetSuite",
        link="https://brokenrubik.com/case-studies/streamlining-sales",
        category="Integration",
    ),
    CaseStudyRef(
        id="pergola",
        title="Pergola Planner",
        summary="Empowering DIY Pergola Customization and Purchase",
        link="https://brokenrubik.com/case-studies/pergola-planner",
        category="Product",
    ),
    CaseStudyRef(
        id="cartridges",
        title="Cartridges Direct",
        summary="Find your cartridges in three easy steps",
        link="https://brokenrubik.com/case-studies/cartridges-direct",
        category="Product",
    ),
    CaseStudyRef(
        id="amp-tab",
        title="B2B Order Management with AMP Tab",
        summary="AMP Tab and NetSuite Integration for RST Brands",
        link="https://brokenrubik.com/case-studies/b2b-amp-tab",
        category="B2B",
    ),
]

_BY_ID: Dict[str, CaseStudyRef] = {study.id: study for study in CASE_STUDIES}

# Selection for new quotes
DEFAULT_CASE_STUDY_IDS = (
    "dynamic-promotions",
    "shopify-netsuite",
    "performance-overhaul",
    "suitecommerce-to-shopify",
    "netsuite-deposco",
    "klim-b2b",
)


def get_case_studies_by_ids(ids: Iterable[str]) -> ListType[CaseStudyRef]:
    """Look up case studies in the given order, skipping unknown ids."""
    return [_BY_ID[case_id] for case_id in ids if case_id in _BY_ID]


DEFAULT_DOCUMENT = """---
title: NetSuite ERP Optimization &
titleAccent: Shopify Integration.
subtitle: A comprehensive proposal to stabilize your ERP environment, automate order-to-cash workflows, and implement a scalable B2B portal.
clientName: Acme Industries Inc.
clientAddress: 100 Innovation Dr, Suite 500
clientCity: San Francisco, CA 94105
---

## Executive Summary

This proposal outlines a comprehensive solution to optimize your NetSuite ERP environment and integrate it seamlessly with your Shopify e-commerce platform. Our approach focuses on three key areas:

- **ERP Stabilization**: Address performance bottlenecks and data integrity issues
- **Workflow Automation**: Streamline order-to-cash and procure-to-pay processes
- **B2B Portal Implementation**: Create a scalable self-service portal for your wholesale customers

## Scope of Work

### Phase 1: Discovery & Assessment

During the discovery phase, we will conduct a thorough analysis of your current NetSuite environment:

- Comprehensive audit of existing customizations and scripts
- Performance analysis and bottleneck identification
- Data integrity review and cleanup recommendations
- Integration architecture assessment
- Stakeholder interviews to understand pain points

### Phase 2: ERP Optimization

Based on our findings, we will implement the following optimizations:

- Script refactoring for improved performance
- Saved search optimization
- Role and permission restructuring
- Custom record cleanup and consolidation
- Scheduled script efficiency improvements

### Phase 3: Shopify Integration

Our integration approach ensures real-time synchronization between platforms:

- Bidirectional inventory sync
- Order import with custom field mapping
- Customer data synchronization
- Product information management
- Fulfillment status updates

### Phase 4: B2B Portal Development

A custom SuiteCommerce implementation tailored to your wholesale business:

- Customer-specific pricing and catalogs
- Quick order functionality
- Order history and reordering
- Account statement access
- Credit limit management

## Investment Summary

| Phase | Description | Hours | Rate | Total |
|-------|-------------|-------|------|-------|
| Phase 1 | Discovery & Assessment | 24 | $175 | $4,200 |
| Phase 2 | ERP Optimization | 48 | $175 | $8,400 |
| Phase 3 | Shopify Integration | 64 | $175 | $11,200 |
| Phase 4 | B2B Portal | 80 | $175 | $14,000 |
| - | Project Management | 20 | $150 | $3,000 |
| - | QA & Testing | 24 | $150 | $3,600 |

> **Total Investment: $44,400 USD**

## Project Timeline

The project will be delivered over a 12-week period:

1. **Weeks 1-2**: Discovery & Assessment
2. **Weeks 3-5**: ERP Optimization
3. **Weeks 6-9**: Shopify Integration Development
4. **Weeks 10-12**: B2B Portal Development & Go-Live

## Deliverables

Upon project completion, you will receive:

- Fully optimized NetSuite environment
- Real-time Shopify integration
- Custom B2B portal with wholesale features
- Complete technical documentation
- Admin training sessions (4 hours)
- End-user training sessions (8 hours)
- 30 days of post-launch support

## Terms & Conditions

- 50% deposit required to commence work
- Remaining balance due upon project completion
- Change requests quoted separately
- This proposal is valid for 30 days

## Next Steps

1. Review and approve this proposal
2. Sign Statement of Work
3. Submit initial deposit
4. Schedule project kickoff meeting

---

*Questions? Contact us at contact@brokenrubik.co*
"""
